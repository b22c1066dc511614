"""Campaigns with their resources, templates and scheduled publications."""

import sqlite3

from campaigndb.domain.types import Seed
from campaigndb.infrastructure.database.seeds.helpers import insert_rows

CAMPAIGNS = [
    ("campaign-001", "workspace-001", "Winter Menu Promotion", "Grow sales of the seasonal winter menu",
     "2025-01-15", "2025-02-15", '["facebook", "instagram"]', 24, "optimized",
     "Promote the winter menu: fresh seasonal ingredients and warm dishes", "active"),
    ("campaign-002", "workspace-002", "New Year Motivation", "Bring in new members during January",
     "2025-01-01", "2025-01-31", '["instagram", "facebook"]', 12, "unified",
     "Motivational content about fitness goals and consistency", "active"),
    ("campaign-003", "workspace-003", "Cloud Services Launch", "Promote the new cloud computing services",
     "2025-01-20", "2025-03-20", '["linkedin", "twitter"]', 48, "optimized",
     "Professional content on cloud services, security and customer success", "active"),
    ("campaign-004", "workspace-startup-001", "Sustainability Month", "Promote eco products during March",
     "2025-03-01", "2025-03-31", '["instagram", "linkedin"]', 36, "unified",
     "Content about sustainability and conscious living", "draft"),
    ("campaign-005", "workspace-enterprise-001", "Annual Report 2024", "Communicate yearly results",
     "2024-12-15", "2024-12-31", '["linkedin"]', 72, "optimized",
     "Corporate content about annual results and outlook", "completed"),
]

CAMPAIGN_RESOURCES = [
    ("campaign-001", "resource-001"),
    ("campaign-001", "resource-002"),
    ("campaign-001", "resource-003"),
    ("campaign-002", "resource-004"),
    ("campaign-002", "resource-005"),
    ("campaign-003", "resource-006"),
    ("campaign-003", "resource-007"),
    ("campaign-004", "resource-008"),
    ("campaign-005", "resource-009"),
]

CAMPAIGN_TEMPLATES = [
    ("campaign-001", "template-001"),
    ("campaign-001", "template-002"),
    ("campaign-002", "template-003"),
    ("campaign-003", "template-004"),
    ("campaign-004", "template-005"),
    ("campaign-005", "template-006"),
]

# Every scheduled_date falls inside its campaign's date range.
PUBLICATIONS = [
    ("pub-001", "campaign-001", "template-001", "resource-001", "facebook",
     "Discover our winter menu. Warm dishes made with seasonal ingredients.",
     "/api/resources/paella.jpg", "2025-01-16 12:00:00", "scheduled"),
    ("pub-002", "campaign-001", "template-002", "resource-002", "instagram",
     "Winter tastes better here. Cosy room, unique flavours.",
     "/api/resources/interior.jpg", "2025-01-17 19:00:00", "scheduled"),
    ("pub-003", "campaign-002", "template-003", "resource-004", "instagram",
     "2025 is your year. Start your fitness transformation today.",
     "/api/resources/functional-training.jpg", "2025-01-05 07:00:00", "published"),
    ("pub-004", "campaign-003", "template-004", "resource-006", "linkedin",
     "Digital transformation is business evolution. Meet our cloud services.",
     "/api/resources/modern-office.jpg", "2025-01-21 10:00:00", "scheduled"),
    ("pub-005", "campaign-003", "template-004", "resource-007", "twitter",
     "Cloud computing that scales with you.",
     "/api/resources/product-demo.mp4", "2025-01-22 15:00:00", "failed"),
    ("pub-006", "campaign-005", "template-006", "resource-009", "linkedin",
     "We close 2024 with 25% growth. Thank you to our team and clients.",
     "/api/resources/corporate-building.jpg", "2024-12-20 10:00:00", "published"),
]


def run(conn: sqlite3.Connection) -> None:
    insert_rows(
        conn,
        "campaigns",
        [
            "id", "workspace_id", "name", "objective", "start_date", "end_date",
            "social_networks", "interval_hours", "content_type", "prompt", "status",
        ],
        CAMPAIGNS,
    )
    insert_rows(conn, "campaign_resources", ["campaign_id", "resource_id"], CAMPAIGN_RESOURCES)
    insert_rows(conn, "campaign_templates", ["campaign_id", "template_id"], CAMPAIGN_TEMPLATES)
    insert_rows(
        conn,
        "publications",
        [
            "id", "campaign_id", "template_id", "resource_id", "social_network",
            "content", "image_url", "scheduled_date", "status",
        ],
        PUBLICATIONS,
    )


SEED = Seed(
    name="campaign_data",
    description="Campaigns, campaign resources/templates and publications",
    run=run,
)
