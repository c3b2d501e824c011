"""
Product storage backends.
"""

from cafe_crawler.crawling.storage.base import ProductStorage
from cafe_crawler.crawling.storage.http_upload import HttpUploadStorage
from cafe_crawler.crawling.storage.json_file import JsonFileProductStorage, latest_output_file, load_products

__all__ = [
    "HttpUploadStorage",
    "JsonFileProductStorage",
    "ProductStorage",
    "latest_output_file",
    "load_products",
]
