"""SQLAlchemy persistence: engine/session, ORM models, repositories, migrations."""
