from pydantic import BaseModel, ConfigDict, Field


class UploadRequest(BaseModel):
    """JSON upload body. Both fields are checked by the route so that a
    missing value answers 400 rather than a validation 422."""

    model_config = ConfigDict(populate_by_name=True)

    file_name: str | None = Field(default=None, alias="fileName")
    file_content: str | None = Field(default=None, alias="fileContent")
    # accepted for client compatibility; the extractor sniffs the bytes itself
    content_type: str | None = Field(default=None, alias="contentType")


class UploadResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    document_id: str = Field(alias="documentId")
    message: str
