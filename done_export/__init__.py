"""
done-export: export completed list items older than a threshold to CSV
files in a SharePoint document library.
"""

__version__ = "0.1.0"
