"""Wire format and remote query helpers for route segments."""
