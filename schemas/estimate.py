from __future__ import annotations

from typing import Any, Optional, Union

from pydantic import BaseModel, Field, StrictFloat, StrictInt

Number = Union[StrictInt, StrictFloat]


class CalculatedValues(BaseModel):
    """Totals computed by the estimate form; stored as sent, but they must be numbers."""

    product_total: Number = Field(0, alias="productTotal")
    total_purchase: Number = Field(0, alias="totalPurchase")
    vat_amount: Number = Field(0, alias="vatAmount")
    final_payment: Number = Field(0, alias="finalPayment")

    model_config = {"populate_by_name": True}


class EstimateBody(BaseModel):
    estimate_type: Optional[str] = Field(None, alias="estimateType")
    customer_info: Optional[dict[str, Any]] = Field(None, alias="customerInfo")
    table_data: list[dict[str, Any]] = Field(default_factory=list, alias="tableData")
    service_data: list[dict[str, Any]] = Field(default_factory=list, alias="serviceData")
    payment_info: dict[str, Any] = Field(default_factory=dict, alias="paymentInfo")
    calculated_values: Optional[CalculatedValues] = Field(None, alias="calculatedValues")
    notes: Optional[str] = None
    is_contractor: bool = Field(False, alias="isContractor")
    estimate_description: Optional[str] = Field(None, alias="estimateDescription")

    model_config = {"populate_by_name": True}


class DeleteNonContractorsRequest(BaseModel):
    start_date: Optional[str] = Field(None, alias="startDate")
    end_date: Optional[str] = Field(None, alias="endDate")
    exclude_old_data: bool = Field(False, alias="excludeOldData")

    model_config = {"populate_by_name": True}


class PriceImportRequest(BaseModel):
    html: str


class AnnouncementUpdate(BaseModel):
    # Any JSON value; the handler rejects anything but a non-empty string with 400
    content: Any = None
