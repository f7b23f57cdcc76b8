class StatEntryException(Exception):
    """Base class for all exceptions raised by team_stat_entry."""
