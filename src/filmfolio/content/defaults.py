"""Built-in default document used when no backend holds one yet."""

from __future__ import annotations

from filmfolio.content.models import (
    Category,
    ContactInfo,
    ContentDocument,
    Project,
    SiteProfile,
    StaffCredit,
)

PLACEHOLDER_POSTER = (
    "https://images.unsplash.com/photo-1485846234645-a62644f84728"
    "?auto=format&fit=crop&q=80"
)


def default_document() -> ContentDocument:
    """Return a fresh copy of the default document.

    A new instance is built on every call so callers can edit it freely.
    """
    return ContentDocument(
        projects=[
            Project(
                id="1",
                category=Category.DIRECTING.value,
                year="2023",
                title_local="밤의 파편",
                title_alt="Fragments of the Night",
                genre="Noir / Drama",
                runtime="24min",
                role="Director / Writer",
                synopsis=(
                    "어둠이 가득한 도시에서 잃어버린 기억의 조각을 찾아 헤매는 남자의 이야기. "
                    "차가운 색조와 고요한 미장센을 통해 고독을 시각화하였다."
                ),
                awards=["2023 서울독립영화제 상영작", "제25회 부산국제영화제 우수상"],
                main_image="https://picsum.photos/id/10/1200/800",
                stills=[
                    "https://picsum.photos/id/11/800/600",
                    "https://picsum.photos/id/12/800/600",
                ],
            ),
        ],
        staff=[
            StaffCredit(id="s1", year="2024", project="대형 프로젝트 A", role="Camera Assistant"),
            StaffCredit(id="s2", year="2023", project="단편 영화 B", role="Lighting Staff"),
        ],
        site=SiteProfile(
            name="KIM DIRECTOR",
            philosophy="STILLNESS IN MOTION, SILENCE IN SOUND",
            about_text=(
                "영화적인 시각과 깊이 있는 탐구를 통해 인간의 내면을 포착합니다. "
                "연출과 촬영의 경계를 허물고 고유한 미학을 구축하고자 합니다."
            ),
            contact_title="Let's collaborate on your next story",
            home_bg_image="https://picsum.photos/id/20/1920/1080?grayscale",
            profile_image="https://picsum.photos/id/64/400/400?grayscale",
            contact=ContactInfo(
                email="director@example.com",
                phone="+82 10-1234-5678",
                instagram="https://instagram.com/director_portfolio",
                youtube="https://youtube.com/@director",
            ),
        ),
    )
