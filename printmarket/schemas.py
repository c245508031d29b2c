"""
Typed request payloads for the vendor and admin APIs.

Handlers validate incoming JSON/form data with these models before
calling into the services.
"""

from typing import List, Literal, Optional

from pydantic import BaseModel, Field, model_validator


PostValidationAction = Literal["AUTO_PUBLISH", "TO_DRAFT"]


class DesignMetadata(BaseModel):
    name: str = Field("", max_length=255, description="Display name")
    description: str = Field("", description="Free-form description")
    tags: List[str] = Field(default_factory=list, description="Search tags")
    category: Optional[str] = Field(None, max_length=100)


class UpdateDesign(BaseModel):
    name: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    tags: Optional[List[str]] = None
    category: Optional[str] = Field(None, max_length=100)


class CreateProduct(BaseModel):
    base_product_id: int = Field(..., ge=1, description="Catalog base product id")
    design_id: Optional[int] = Field(None, ge=1, description="Reuse an uploaded design")
    name: str = Field(..., min_length=1, max_length=255)
    description: str = ""
    price: int = Field(..., ge=0, description="Price in minor units")
    stock: int = Field(0, ge=0)
    sizes: List[str] = Field(default_factory=list)
    colors: List[str] = Field(default_factory=list)
    post_validation_action: Optional[PostValidationAction] = None
    design: Optional[DesignMetadata] = None

    def product_fields(self):
        return self.model_dump(include={"name", "description", "price", "stock", "sizes", "colors"})


class SetPostValidationAction(BaseModel):
    action: PostValidationAction


class Decision(BaseModel):
    decision: Literal["VALIDATE", "REJECT"]
    reason: Optional[str] = Field(None, max_length=2000)

    @model_validator(mode="after")
    def _reason_for_rejection(self):
        if self.decision == "REJECT" and not (self.reason or "").strip():
            raise ValueError("reason is required when rejecting a design")
        return self
