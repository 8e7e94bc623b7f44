"""
Adapters layer - Loading roster data from external storage.
"""

from .yaml_roster_source import YamlRosterSource

__all__ = ["YamlRosterSource"]
