from sqlalchemy.orm import DeclarativeBase

class Base(DeclarativeBase):
    pass

# Import all models here to register them with SQLAlchemy
# This must happen after Base is defined
from chartpaper.models import chart, chart_dependency, chart_app, registry_config  # noqa: F401, E402
