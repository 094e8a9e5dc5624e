from pydantic import BaseModel, ConfigDict, Field
from typing import Any


class PlatformModel(BaseModel):
    """Records the console writes. Wire names are camelCase; unknown keys ride along."""
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class SessionUser(BaseModel):
    id: str
    email: str | None = None
    name: str | None = None
    role: str = "USER"
    photo_url: str | None = Field(default=None, alias="photoURL")

    class Config:
        populate_by_name = True
        extra = "allow"

    @property
    def display_name(self) -> str:
        return self.name or "Admin"

    @classmethod
    def from_user_data(cls, data: dict[str, Any]) -> "SessionUser":
        data = dict(data or {})
        # The platform sends id for users and uid on some legacy payloads
        if "id" not in data and "uid" in data:
            data["id"] = data["uid"]
        data["id"] = str(data.get("id", ""))
        return cls.model_validate(data)


class BlogIn(PlatformModel):
    title: str
    slug: str = ""
    content: str
    category: str = "General"
    seo_title: str = Field(default="", alias="seoTitle")
    seo_description: str = Field(default="", alias="seoDescription")
    focus_keyword: str = Field(default="", alias="focusKeyword")
    featured_image: str = Field(default="", alias="featuredImage")
    tags: list[str] = Field(default_factory=list)
    status: str = "approved"
    author_id: str | None = Field(default=None, alias="authorId")
    author_name: str = Field(default="Admin", alias="authorName")
    author_email: str | None = Field(default=None, alias="authorEmail")
    is_admin_post: bool = Field(default=True, alias="isAdminPost")
    seo_score: int = Field(default=85, alias="seoScore")
    content_score: int = Field(default=100, alias="contentScore")
    ads_enabled: bool = Field(default=True, alias="adsEnabled")
    ad_placements: list[str] = Field(default_factory=lambda: ["top", "inContent", "bottom"], alias="adPlacements")
    ad_interval: int = Field(default=0, alias="adInterval")


class DraftIn(PlatformModel):
    title: str
    slug: str = ""
    content: str = ""
    excerpt: str = ""
    category: str = "General"
    thumbnail: str = ""
    seo_title: str = Field(default="", alias="seoTitle")
    seo_description: str = Field(default="", alias="seoDescription")
    keywords: list[str] = Field(default_factory=list)


class MangaIn(PlatformModel):
    title: str
    slug: str
    description: str = ""
    alternative_names: str = Field(default="", alias="alternativeNames")
    total_chapters: int = Field(default=0, alias="totalChapters")
    redirect_base_url: str = Field(default="", alias="redirectBaseUrl")
    chapter_format: str = Field(default="chapter-{n}", alias="chapterFormat")
    chapter_padding: int = Field(default=0, alias="chapterPadding")
    cover_url: str = Field(default="", alias="coverUrl")
    seo_title: str = Field(default="", alias="seoTitle")
    seo_description: str = Field(default="", alias="seoDescription")
    focus_keyword: str = Field(default="", alias="focusKeyword")
    author: str = ""
    genre: str = ""
    status: str = "Ongoing"
    show_on_web: bool = Field(default=True, alias="showOnWeb")
    show_on_android: bool = Field(default=True, alias="showOnAndroid")
    show_on_ios: bool = Field(default=True, alias="showOnIOS")


class Sponsor(PlatformModel):
    banner_url: str = Field(default="", alias="bannerUrl")
    redirect_url: str = Field(default="", alias="redirectUrl")
    name: str = ""


class GiveawayIn(PlatformModel):
    title: str
    description: str = ""
    image_url: str = Field(alias="imageUrl")
    prize_details: str = Field(default="", alias="prizeDetails")
    mode: str = "random"
    required_points: int = Field(default=0, alias="requiredPoints")
    target_participants: int = Field(default=100, alias="targetParticipants")
    start_date: str = Field(alias="startDate")
    end_date: str = Field(alias="endDate")
    max_extensions: int = Field(default=0, alias="maxExtensions")
    status: str = "draft"
    invite_points_enabled: bool = Field(default=False, alias="invitePointsEnabled")
    invite_points_cap: int = Field(default=10, alias="invitePointsCap")
    invite_points_per_referral: int = Field(default=1, alias="invitePointsPerReferral")
    winner_selection_mode: str = Field(default="SYSTEM_RANDOM", alias="winnerSelectionMode")
    support_enabled: bool = Field(default=True, alias="supportEnabled")
    sponsors: list[Sponsor] = Field(default_factory=list)


class GiveawayTaskIn(PlatformModel):
    type: str = "custom"
    title: str
    description: str = ""
    points: int = 1
    required: bool = False
    metadata: dict[str, Any] = Field(default_factory=dict)
