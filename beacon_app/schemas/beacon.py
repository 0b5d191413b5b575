from pydantic import BaseModel, Field

# Reported to the client script; bumping it changes the response body.
BEACON_VERSION = "2.4"


class Hit(BaseModel):
    """One inbound beacon request, decomposed. Never persisted."""

    host: str = Field(..., description="Hostname of the referring page (the site)")
    path: str = Field(..., description="Path of the referring page")
    client_id: str = Field(..., description="Client identity, usually the IP address")
    callback: str = Field(..., description="JSONP callback name")

    @property
    def page(self) -> tuple:
        return (self.host, self.path)


class MetricCounts(BaseModel):
    """Current values of the three metrics; 0 marks a degraded metric"""

    site_uv: int = 0
    site_pv: int = 0
    page_pv: int = 0


class ErrorResponse(BaseModel):
    code: int
    message: str


def render_jsonp(callback: str, counts: MetricCounts) -> str:
    """
    Build the JSONP body.

    The callback is inserted as given; the try/catch keeps a broken
    callback from aborting the embedding page's scripts.
    """
    payload = (
        f'{{"site_uv":{counts.site_uv},"page_pv":{counts.page_pv},'
        f'"version":{BEACON_VERSION},"site_pv":{counts.site_pv}}}'
    )
    return f"try{{{callback}({payload})}}catch(e){{}}"
