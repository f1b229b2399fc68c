"""railsbox - throwaway Rails projects for scripted verification."""

__version__ = "0.1.0"
