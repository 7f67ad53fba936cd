from pydantic import BaseModel, Field

class UploadUrlRequest(BaseModel):
    filename: str = Field(..., min_length=1)

class UploadUrlResponse(BaseModel):
    upload_url: str
    s3_path: str

class DownloadUrlResponse(BaseModel):
    download_url: str
