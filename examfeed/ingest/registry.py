from __future__ import annotations

from .base import (
    HEADING_BLOCKS,
    LINK_PROXIMITY,
    PAGE_MODE_FIRST_SUCCESS,
    TABLE,
    PageDescriptor,
    SourceDescriptor,
)

# Coaching blogs share one layout family: one listing page per channel.
_BLOG_SOURCES: tuple[tuple[str, str, tuple[tuple[str, str], ...]], ...] = (
    (
        "Testbook",
        "https://testbook.com",
        (
            ("https://testbook.com/blog/latest-govt-jobs/", "jobs"),
            ("https://testbook.com/blog/admit-card/", "admit-card"),
            ("https://testbook.com/blog/results/", "result"),
        ),
    ),
    (
        "Adda247",
        "https://www.adda247.com",
        (
            ("https://www.adda247.com/jobs/", "jobs"),
            ("https://www.adda247.com/tag/admit-card/", "admit-card"),
            ("https://www.adda247.com/sarkari-result/", "result"),
        ),
    ),
    (
        "Oliveboard",
        "https://www.oliveboard.in",
        (
            ("https://www.oliveboard.in/blog/category/recruitment/", "jobs"),
            ("https://www.oliveboard.in/blog/category/admit-cards/", "admit-card"),
            ("https://www.oliveboard.in/blog/category/results/", "result"),
        ),
    ),
    (
        "BYJU'S Exam Prep",
        "https://byjusexamprep.com",
        (
            ("https://byjusexamprep.com/blog/category/government-jobs/", "jobs"),
            ("https://byjusexamprep.com/blog/category/admit-cards/", "admit-card"),
            ("https://byjusexamprep.com/blog/category/results/", "result"),
        ),
    ),
    (
        "Career Power",
        "https://www.careerpower.in",
        (
            ("https://www.careerpower.in/blog/category/government-jobs", "jobs"),
            ("https://www.careerpower.in/blog/tag/admit-card", "admit-card"),
            ("https://www.careerpower.in/blog/category/results", "result"),
        ),
    ),
    (
        "PracticeMock",
        "https://www.practicemock.com",
        (("https://www.practicemock.com/blog/", "news"),),
    ),
    (
        "Guidely",
        "https://guidely.in",
        (
            ("https://guidely.in/blog/category/exams/notifications", "notification"),
            ("https://guidely.in/blog/category/exams/admit-card", "admit-card"),
            ("https://guidely.in/blog/category/exams/result", "result"),
        ),
    ),
    (
        "ixamBee",
        "https://www.ixambee.com",
        (
            ("https://www.ixambee.com/blog/category/jobs", "jobs"),
            ("https://www.ixambee.com/blog/category/admit-card", "admit-card"),
            ("https://www.ixambee.com/blog/category/result", "result"),
        ),
    ),
    (
        "BankersDaily",
        "https://www.bankersdaily.in",
        (
            ("https://www.bankersdaily.in/category/exams/recruitment/", "jobs"),
            ("https://www.bankersdaily.in/category/admit-card/", "admit-card"),
            ("https://www.bankersdaily.in/category/results/", "result"),
        ),
    ),
    (
        "AffairsCloud",
        "https://affairscloud.com",
        (
            ("https://affairscloud.com/jobs/", "jobs"),
            ("https://affairscloud.com/tag/admit-card/", "admit-card"),
            ("https://affairscloud.com/tag/result/", "result"),
        ),
    ),
    (
        "Aglasem",
        "https://aglasem.com",
        (
            ("https://aglasem.com/category/jobs/", "jobs"),
            ("https://aglasem.com/category/admit-card/", "admit-card"),
            ("https://aglasem.com/category/result/", "result"),
        ),
    ),
    (
        "StudyIQ",
        "https://studyiq.com",
        (
            ("https://studyiq.com/category/jobs/", "jobs"),
            ("https://studyiq.com/category/admit-card/", "admit-card"),
            ("https://studyiq.com/category/result/", "result"),
        ),
    ),
    (
        "Examstocks",
        "https://www.examstocks.com",
        (
            ("https://www.examstocks.com/category/jobs/", "jobs"),
            ("https://www.examstocks.com/category/admit-card/", "admit-card"),
            ("https://www.examstocks.com/category/result/", "result"),
        ),
    ),
)

TIME_SOURCE = SourceDescriptor(
    name="T.I.M.E.",
    base_url="https://www.time4education.com/",
    pages=(
        PageDescriptor(
            url="https://www.time4education.com/local/articlecms/all.php?types=notres",
            strategies=(TABLE,),
        ),
        PageDescriptor(
            url="https://www.time4education.com/local/articlecms/all.php?course=Bank&type=articles",
            strategies=(HEADING_BLOCKS,),
            sections=(("notifications / results", "notification"), ("news / articles", "news")),
        ),
    ),
)

SSC_SOURCE = SourceDescriptor(
    name="SSC",
    base_url="https://ssc.gov.in",
    pages=tuple(
        PageDescriptor(url=url, channel="notification", strategies=(LINK_PROXIMITY,))
        for url in (
            "https://ssc.gov.in/notice-board",
            "https://ssc.gov.in/noticeboard",
            "https://ssc.gov.in/Notices",
            "https://ssc.gov.in/",
        )
    ),
    page_mode=PAGE_MODE_FIRST_SUCCESS,
)


def _blog_source(name: str, base_url: str, pages: tuple[tuple[str, str], ...]) -> SourceDescriptor:
    return SourceDescriptor(
        name=name,
        base_url=base_url,
        pages=tuple(PageDescriptor(url=url, channel=channel) for url, channel in pages),
    )


def register_sources() -> list[SourceDescriptor]:
    blog_sources = [_blog_source(name, base_url, pages) for name, base_url, pages in _BLOG_SOURCES]
    # Order decides which source wins a duplicate URL.
    return [*blog_sources[:3], TIME_SOURCE, *blog_sources[3:], SSC_SOURCE]
