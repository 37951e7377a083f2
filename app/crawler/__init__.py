from app.crawler.base import BaseCrawler
from app.crawler.registry import CrawlerRegistry, registry

# Import crawlers to register them on module import.
from app.crawler import buzz_checker, civic_hall_checker, crea_checker
from app.crawler.remote_checker import register_remote_crawlers

register_remote_crawlers()

__all__ = ["BaseCrawler", "CrawlerRegistry", "registry"]
