"""Demo catalog uploaded by "Upload Demo Data"."""

from .models import CatalogRecord, Episode


def _ep(season, number, title, duration, code):
    return Episode(id=f"demo-s{season}e{number}", season=season, number=number, title=title, duration=duration, telegram_code=code)


DEMO_MOVIES = [
    CatalogRecord(
        title="Dune: Part Two",
        category="Exclusive",
        thumbnail="https://image.tmdb.org/t/p/w500/8b8R8l88Qje9dn9OE8PY05Nxl1X.jpg",
        telegram_code="dune2_4k",
        year="2024",
        rating=8.8,
        quality="4K HDR",
        description="Paul Atreides unites with the Fremen while on a warpath of revenge.",
        views="12500",
        is_premium=True,
    ),
    CatalogRecord(
        title="Oppenheimer",
        category="All",
        thumbnail="https://image.tmdb.org/t/p/w500/8Gxv8gSFCU0XGDykEGv7zR1n2ua.jpg",
        telegram_code="oppenheimer_1080",
        year="2023",
        rating=8.5,
        quality="1080p",
        description="The story of J. Robert Oppenheimer and the atomic bomb.",
        views="9800",
    ),
    CatalogRecord(
        title="Shogun",
        category="Series",
        thumbnail="https://image.tmdb.org/t/p/w500/7O4iVfOMQmdCSxhOg1WnzG1AgYT.jpg",
        year="2024",
        rating=8.7,
        quality="4K",
        description="A shipwrecked English sailor is caught in a struggle for power in feudal Japan.",
        episodes=(
            _ep(1, 1, "Anjin", "70m", "shogun_s1e1"),
            _ep(1, 2, "Servants of Two Masters", "58m", "shogun_s1e2"),
            _ep(1, 3, "Tomorrow Is Tomorrow", "60m", "shogun_s1e3"),
        ),
        views="7400",
    ),
    CatalogRecord(
        title="Queen of Tears",
        category="Korean Drama",
        thumbnail="https://image.tmdb.org/t/p/w500/9vHqUG1jUdmYKfLtYm7EkL4gDNG.jpg",
        year="2024",
        rating=8.9,
        quality="1080p",
        description="A chaebol heiress and her husband weather a marital crisis.",
        episodes=(
            _ep(1, 1, "Episode 1", "80m", "qot_s1e1"),
            _ep(1, 2, "Episode 2", "78m", "qot_s1e2"),
        ),
        views="15300",
    ),
    CatalogRecord(
        title="The Last of Us",
        category="Series",
        thumbnail="https://image.tmdb.org/t/p/w500/uKvVjHNqB5VmOrdxqAt2F7J78ED.jpg",
        year="2023",
        rating=8.8,
        quality="4K HDR",
        description="Joel and Ellie cross a post-apocalyptic United States.",
        episodes=(
            _ep(1, 1, "When You're Lost in the Darkness", "81m", "tlou_s1e1"),
            _ep(1, 2, "Infected", "53m", "tlou_s1e2"),
            _ep(2, 1, "Future Days", "59m", "tlou_s2e1"),
        ),
        views="21000",
    ),
]
