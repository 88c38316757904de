from schemas.application import (
    INFORMATION_FIELDS,
    INFORMATION_SCHEMAS,
    REQUIRED_FIELDS,
    AsInformation,
    ComputerInformation,
    InquiryInformation,
    NotebookInformation,
    PrinterInformation,
    ServiceStatusUpdate,
)
from schemas.estimate import (
    AnnouncementUpdate,
    CalculatedValues,
    DeleteNonContractorsRequest,
    EstimateBody,
    PriceImportRequest,
)
from schemas.review import ReviewCreate, ReviewStatusUpdate
from schemas.storage import CacheInvalidateRequest, StorageDeleteRequest
from schemas.user import CheckNameRequest, RegisterRequest

__all__ = [
    "INFORMATION_FIELDS",
    "INFORMATION_SCHEMAS",
    "REQUIRED_FIELDS",
    "AsInformation",
    "ComputerInformation",
    "InquiryInformation",
    "NotebookInformation",
    "PrinterInformation",
    "ServiceStatusUpdate",
    "AnnouncementUpdate",
    "CalculatedValues",
    "DeleteNonContractorsRequest",
    "EstimateBody",
    "PriceImportRequest",
    "ReviewCreate",
    "ReviewStatusUpdate",
    "CacheInvalidateRequest",
    "StorageDeleteRequest",
    "CheckNameRequest",
    "RegisterRequest",
]
