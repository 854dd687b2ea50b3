"""Core engine modules.

- entitlement: free quota and premium gating
- sampler: anti-repeat sampling with top-up
- composer: single-subject, stream and chapter papers, final shuffle
- statistics: submission recording and running-mean updates
- progress: progress, history and leaderboard summaries
- exam_service: request flows wiring the above to repositories
- bank_importer: question bank seeding from YAML/JSON files
"""

__all__ = [
    "entitlement",
    "sampler",
    "composer",
    "statistics",
    "progress",
    "exam_service",
    "bank_importer",
]
