from pydantic import BaseModel

from profile_extractor.schemas.business_info import ExtractedBusinessInfo


class AnalyzedWebsite(BaseModel):
    base_url: str
    business_info: ExtractedBusinessInfo
    # Page URL -> main text excerpt
    page_contents: dict[str, str] = {}
    recommended_pages: list[str] = []
    content_summary: str = ""
