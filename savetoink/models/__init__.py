"""Data models for savetoink."""

from .article import Article, ArticlePage, DeliveryReceipt, DeliveryStatus
from .base import DBModel

__all__ = ["Article", "ArticlePage", "DBModel", "DeliveryReceipt", "DeliveryStatus"]
