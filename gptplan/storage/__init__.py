"""Layout planning and image writing."""
