from pydantic import BaseModel, Field


class TableDescriptor(BaseModel):
    table_name: str
    table_id: str
    app_token: str
    sort: int = 0
    description: str = ""
    record_id: str | None = None
    is_default: bool = False


class TableDescriptorPage(BaseModel):
    items: list[TableDescriptor] = Field(default_factory=list)
    page_token: str | None = None
    has_more: bool = False


class TableDescriptorPageOut(BaseModel):
    success: bool = True
    data: TableDescriptorPage


class TableDescriptorListOut(BaseModel):
    success: bool = True
    data: list[TableDescriptor] = Field(default_factory=list)


class TableCreateRequest(BaseModel):
    table_name: str | None = None
    description: str | None = None


class TableCreateOut(BaseModel):
    success: bool = True
    message: str
    data: TableDescriptor
