"""redeploy: trigger CI/CD rebuilds across GitHub repositories."""

__version__ = "0.1.0"
