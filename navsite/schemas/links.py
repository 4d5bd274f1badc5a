from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, SerializerFunctionWrapHandler, model_serializer

SubmissionTarget = Literal["published", "staging"]

# Present only on some records; left out of the payload when unset.
OPTIONAL_LINK_KEYS = (
    "description",
    "fullDescription",
    "full_description",
    "tableId",
    "table_id",
    "createdAt",
    "created_at",
)


class LinkRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    url: str
    category: str
    sort: int = 0
    icon: str = ""
    description: str | None = None
    full_description: str | None = Field(default=None, alias="fullDescription")
    table_id: str | None = Field(default=None, alias="tableId")
    created_at: str | None = Field(default=None, alias="createdAt")

    @model_serializer(mode="wrap")
    def _omit_missing_optionals(self, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
        data = handler(self)
        for key in OPTIONAL_LINK_KEYS:
            if key in data and data[key] is None:
                del data[key]
        return data


class LinkCreateRequest(BaseModel):
    name: str | None = None
    url: str | None = None
    category: str | None = None
    sort: int | None = None
    icon: str | None = None
    table_id: str | None = None


class LinkPatchRequest(BaseModel):
    name: str | None = None
    url: str | None = None
    category: str | None = None
    sort: int | None = None
    icon: str | None = None


class LinkCreateData(BaseModel):
    id: str
    target: SubmissionTarget
    table_id: str | None = None


class LinkCreateOut(BaseModel):
    success: bool = True
    message: str
    data: LinkCreateData


class LinkMutationOut(BaseModel):
    success: bool = True
    message: str
    data: LinkRecord | None = None


class Pagination(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    has_more: bool = Field(default=False, alias="hasMore")
    page_token: str | None = Field(default=None, alias="pageToken")


class PendingLinkListOut(BaseModel):
    success: bool = True
    data: list[LinkRecord] = Field(default_factory=list)


class PendingLinkPageOut(BaseModel):
    success: bool = True
    data: list[LinkRecord] = Field(default_factory=list)
    pagination: Pagination


class ReviewActionOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    message: str
    published_id: str | None = Field(default=None, alias="publishedId")
    cleanup_required: bool = Field(default=False, alias="cleanupRequired")


class NavigationOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    is_mock_data: bool = Field(default=False, alias="isMockData")
    data: dict[str, list[LinkRecord]] = Field(default_factory=dict)
    categories: list[str] = Field(default_factory=list)
    table_id: str | None = Field(default=None, alias="tableId")
    timestamp: str
