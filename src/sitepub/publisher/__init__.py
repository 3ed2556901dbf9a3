# Publisher module
from .static import StaticSiteGenerator
from .hugo import HugoGenerator
from .theme import ThemeManager
from .github import GitHubPublisher

__all__ = ["StaticSiteGenerator", "HugoGenerator", "ThemeManager", "GitHubPublisher"]
