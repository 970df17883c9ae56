"""
The Board Game — Role-Play Training for Nonprofit Board Members
================================================================
Players pick (or are dealt) a governance role, join a shared game session,
pool donations into a prize and operating budgets, then work through a
scripted board-meeting agenda while peers score their scenario answers.

Package layout::

    boardgame/
    ├── config.py          # YAML → typed Python config
    ├── constants.py       # Agenda, phases, voting criteria, badges
    ├── catalog.py         # Roles, scenarios, question banks
    ├── database/
    │   ├── engine.py      # SQLAlchemy engine + async helper
    │   ├── models.py      # All ORM models
    │   └── seed.py        # Default settings + question bank seeder
    ├── engine/
    │   ├── budget.py      # Prize pool / operating budget split
    │   ├── scoring.py     # Peer-vote aggregation, quorum, ballots
    │   └── agenda.py      # Meeting state machine + role gates
    ├── services/
    │   ├── player_service.py        # Profiles, badges, progression
    │   ├── session_service.py       # Sessions, participants, donations
    │   ├── meeting_service.py       # Agenda flow, minutes, motions
    │   ├── answer_service.py        # Open-forum answers + coin votes
    │   ├── scenario_service.py      # Practice scenarios + peer votes
    │   ├── board_meeting_service.py # Standalone meetings + reflections
    │   └── settings_service.py      # Gameplay tuning in the DB
    └── api/
        ├── main.py        # FastAPI app
        ├── deps.py        # JWT secret, engine/config/player dependencies
        ├── auth.py        # Email/password → JWT
        ├── serializers.py # ORM row → dict renderers
        └── routes/        # Catalog, player, session, meeting, admin
"""

__version__ = "0.1.0"
