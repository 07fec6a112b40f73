"""Service packages for the managed secrets deployment."""
