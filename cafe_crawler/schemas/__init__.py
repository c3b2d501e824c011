"""
Wire schemas for external collaborators.
"""

from cafe_crawler.schemas.upload import MutationResponse, UploadResultResponse

__all__ = ["MutationResponse", "UploadResultResponse"]
