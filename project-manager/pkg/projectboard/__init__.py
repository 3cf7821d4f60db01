# Project board: task columns, shared store, and reactive view-models
#
# Components:
#   schema.py     - Data model (Project, ProjectStatus)
#   errors.py     - Error hierarchy (NotFound, DuplicateId, Validation)
#   store.py      - In-memory project store with optional SQLite persistence
#   events.py     - Channels, subscriptions, and the action router
#   viewmodel.py  - Todo / Doing / Done view-models
#   board.py      - Board facade wiring store, router, and view-models
#   config.py     - YAML configuration and logging setup
#   seed.py       - Demo seed data
