"""Client side of licgate: domain rules, the license manager and its collaborators."""
