from groupchat.core.schemas import CamelModel


class SignedUploadResponse(CamelModel):
    signed_url: str
    file_url: str
