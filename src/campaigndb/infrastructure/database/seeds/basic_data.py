"""Agencies, users, workspaces and the media library for development."""

import sqlite3

from campaigndb.domain.types import Seed
from campaigndb.infrastructure.database.seeds.helpers import insert_rows

DEV_PASSWORD_HASH = "$2b$10$dummy.hash.for.development"

AGENCIES = [
    ("agency-demo-001", "Demo Marketing Agency", "demo@agency.com", 1000, "pro", "America/Mexico_City", "es"),
    ("agency-startup-001", "Startup Creative Hub", "hello@startuphub.com", 500, "free", "America/New_York", "en"),
    ("agency-enterprise-001", "Enterprise Solutions Inc", "contact@enterprise.com", 5000, "enterprise", "Europe/Madrid", "es"),
]

USERS = [
    ("user-admin-001", "admin@agency.com", DEV_PASSWORD_HASH, "agency-demo-001", "admin"),
    ("user-member-001", "member@agency.com", DEV_PASSWORD_HASH, "agency-demo-001", "member"),
    ("user-startup-admin", "founder@startuphub.com", DEV_PASSWORD_HASH, "agency-startup-001", "admin"),
    ("user-enterprise-admin", "manager@enterprise.com", DEV_PASSWORD_HASH, "agency-enterprise-001", "admin"),
]

WORKSPACES = [
    ("workspace-001", "agency-demo-001", "La Tradicion Restaurant", "#e11d48", "#64748b", "Flavours that win hearts"),
    ("workspace-002", "agency-demo-001", "Fitness Revolution", "#059669", "#6b7280", "Your best self is waiting"),
    ("workspace-003", "agency-demo-001", "TechSolutions Pro", "#2563eb", "#4b5563", "Innovation that transforms"),
    ("workspace-startup-001", "agency-startup-001", "EcoFriendly Store", "#10b981", "#6b7280", "Green planet, bright future"),
    ("workspace-enterprise-001", "agency-enterprise-001", "Global Finance Corp", "#1f2937", "#9ca3af", "Trust that builds futures"),
]

RESOURCES = [
    ("resource-001", "workspace-001", "Signature Paella", "paella.jpg", "image", "image/jpeg", 245760, 1080, 1080, None),
    ("resource-002", "workspace-001", "Dining Room", "interior.jpg", "image", "image/jpeg", 189440, 1200, 800, None),
    ("resource-003", "workspace-001", "Chef at Work", "chef-cooking.mp4", "video", "video/mp4", 15728640, 1920, 1080, 30),
    ("resource-004", "workspace-002", "Functional Training", "functional-training.jpg", "image", "image/jpeg", 312320, 1080, 1350, None),
    ("resource-005", "workspace-002", "Cardio Routine", "cardio-routine.mp4", "video", "video/mp4", 25165824, 1920, 1080, 45),
    ("resource-006", "workspace-003", "Modern Office", "modern-office.jpg", "image", "image/jpeg", 278528, 1200, 900, None),
    ("resource-007", "workspace-003", "Product Demo", "product-demo.mp4", "video", "video/mp4", 31457280, 1920, 1080, 60),
    ("resource-008", "workspace-startup-001", "Eco Products", "eco-products.jpg", "image", "image/jpeg", 201728, 1080, 1080, None),
    ("resource-009", "workspace-enterprise-001", "Corporate Building", "corporate-building.jpg", "image", "image/jpeg", 334080, 1200, 1600, None),
]

TEMPLATES = [
    ("template-001", "workspace-001", "Dish Promo Post", "single", '["promo-dish.jpg"]', '["facebook", "instagram"]'),
    ("template-002", "workspace-001", "Weekly Menu Carousel", "carousel", '["menu-1.jpg", "menu-2.jpg", "menu-3.jpg"]', '["instagram"]'),
    ("template-003", "workspace-002", "Motivation Post", "single", '["motivation.jpg"]', '["instagram", "facebook"]'),
    ("template-004", "workspace-003", "Corporate Post", "single", '["corporate.jpg"]', '["linkedin", "twitter"]'),
    ("template-005", "workspace-startup-001", "Sustainability Post", "single", '["sustainability.jpg"]', '["instagram", "linkedin"]'),
    ("template-006", "workspace-enterprise-001", "Finance Post", "single", '["finance.jpg"]', '["linkedin"]'),
]


def run(conn: sqlite3.Connection) -> None:
    insert_rows(
        conn,
        "agencies",
        ["id", "name", "email", "credits", "plan", "settings_timezone", "settings_language"],
        AGENCIES,
    )
    insert_rows(conn, "users", ["id", "email", "password_hash", "agency_id", "role"], USERS)
    insert_rows(
        conn,
        "workspaces",
        ["id", "agency_id", "name", "branding_primary_color", "branding_secondary_color", "branding_slogan"],
        WORKSPACES,
    )
    insert_rows(
        conn,
        "resources",
        [
            "id", "workspace_id", "name", "original_name", "file_path", "url",
            "type", "mime_type", "size_bytes", "width", "height", "duration_seconds",
        ],
        [
            (rid, ws, name, original, f"/uploads/{original}", f"/api/resources/{original}", *rest)
            for rid, ws, name, original, *rest in RESOURCES
        ],
    )
    insert_rows(
        conn,
        "templates",
        ["id", "workspace_id", "name", "type", "images", "social_networks"],
        TEMPLATES,
    )


SEED = Seed(
    name="basic_data",
    description="Agencies, users, workspaces, resources and templates",
    run=run,
)
