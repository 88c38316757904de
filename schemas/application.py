"""
Application information is a tagged variant: the application type selects one
schema below. INFORMATION_SCHEMAS maps type -> schema, INFORMATION_FIELDS maps
type -> the response field carrying it, REQUIRED_FIELDS lists what a request
must fill in (camelCase, as sent by clients).
"""
from __future__ import annotations

from typing import Optional, Union

from pydantic import BaseModel, Field


class InformationBase(BaseModel):
    phone_number: Optional[str] = Field(None, alias="phoneNumber")

    model_config = {"populate_by_name": True, "coerce_numbers_to_str": True, "extra": "ignore"}


class DeliveryMixin(BaseModel):
    delivery_method: Optional[str] = Field(None, alias="deliveryMethod")
    address: Optional[str] = None

    model_config = {"populate_by_name": True, "coerce_numbers_to_str": True, "extra": "ignore"}


class ComputerInformation(InformationBase, DeliveryMixin):
    purpose: Optional[str] = None
    budget: Optional[str] = None
    cpu: Optional[str] = None
    gpu: Optional[str] = None
    memory: Optional[str] = None
    storage: Optional[str] = None
    cooling: Optional[str] = None
    os: Optional[str] = None
    additional_requests: Optional[str] = Field(None, alias="additionalRequests")


class PrinterInformation(InformationBase, DeliveryMixin):
    purpose: Optional[str] = None
    budget: Optional[str] = None
    printer_type: Optional[str] = Field(None, alias="printerType")
    infinite_ink: Optional[Union[bool, str]] = Field(None, alias="infiniteInk")
    output_color: Optional[str] = Field(None, alias="outputColor")
    additional_requests: Optional[str] = Field(None, alias="additionalRequests")


class NotebookInformation(InformationBase, DeliveryMixin):
    purpose: Optional[str] = None
    budget: Optional[str] = None
    cpu: Optional[str] = None
    gpu: Optional[str] = None
    weight: Optional[str] = None
    os: Optional[str] = None
    ram: Optional[str] = None
    storage: Optional[str] = None
    additional_requests: Optional[str] = Field(None, alias="additionalRequests")


class AsInformation(InformationBase, DeliveryMixin):
    as_category: Optional[str] = Field(None, alias="asCategory")
    pc_number: Optional[str] = Field(None, alias="pcNumber")
    printer_type: Optional[str] = Field(None, alias="printerType")
    printer_number: Optional[str] = Field(None, alias="printerNumber")
    infinite_ink: Optional[Union[bool, str]] = Field(None, alias="infiniteInk")
    description: Optional[str] = None


class InquiryInformation(InformationBase):
    title: Optional[str] = None
    content: Optional[str] = None


INFORMATION_SCHEMAS: dict[str, type[InformationBase]] = {
    "computer": ComputerInformation,
    "printer": PrinterInformation,
    "notebook": NotebookInformation,
    "as": AsInformation,
    "inquiry": InquiryInformation,
}

INFORMATION_FIELDS = {
    "computer": "computer_information",
    "printer": "printer_information",
    "notebook": "notebook_information",
    "as": "as_information",
    "inquiry": "inquiry_information",
}

REQUIRED_FIELDS = {
    "computer": ("purpose", "budget", "os", "phoneNumber"),
    "printer": ("purpose", "budget", "phoneNumber"),
    "notebook": ("purpose", "os", "phoneNumber"),
    "as": ("asCategory", "description", "phoneNumber"),
    "inquiry": ("title", "content", "phoneNumber"),
}


class ServiceStatusUpdate(BaseModel):
    id: Optional[str] = None
    status: Optional[str] = None
    comment: Optional[str] = None
