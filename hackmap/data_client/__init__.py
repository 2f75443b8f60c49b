from .database import ConnectionMonitor, Database
from .models import Base

__all__ = ["Base", "ConnectionMonitor", "Database"]
