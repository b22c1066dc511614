"""AI content generation: campaign prompts, content descriptions, brand manuals."""

from campaigndb.infrastructure.database.migrations.sql_migration import sql_migration

CAMPAIGN_COLUMNS = [
    ("short_prompt", "TEXT"),
    ("long_prompt", "TEXT"),
    ("selected_resources", "TEXT"),  # JSON array
    ("selected_templates", "TEXT"),  # JSON array
    ("platform_distribution", "TEXT"),  # JSON object
    ("publications_per_day", "INTEGER DEFAULT 1"),
    ("interval_days", "INTEGER DEFAULT 1"),
    (
        "generation_status",
        "TEXT CHECK (generation_status IN ('configuring', 'descriptions_generated', "
        "'content_generating', 'completed')) DEFAULT 'configuring'",
    ),
]

PUBLICATION_COLUMNS = [
    ("content_description_id", "TEXT"),
    ("generated_text", "TEXT"),
    ("generated_image_url", "TEXT"),
    ("generation_metadata", "TEXT"),  # JSON object
]

SQL_UP = "".join(
    f"ALTER TABLE campaigns ADD COLUMN {name} {ddl};\n" for name, ddl in CAMPAIGN_COLUMNS
) + """
CREATE TABLE content_descriptions (
    id TEXT PRIMARY KEY DEFAULT (lower(hex(randomblob(16)))),
    campaign_id TEXT NOT NULL,
    platform TEXT CHECK (platform IN ('facebook', 'instagram', 'twitter', 'linkedin')) NOT NULL,
    scheduled_date DATETIME NOT NULL,
    content_type TEXT CHECK (content_type IN ('text_simple', 'text_image_simple', 'text_image_template', 'carousel')) NOT NULL,
    description TEXT NOT NULL,
    template_id TEXT,
    resource_ids TEXT,  -- JSON array
    status TEXT CHECK (status IN ('pending', 'approved', 'regenerating', 'generated')) DEFAULT 'pending',
    created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
    updated_at DATETIME DEFAULT CURRENT_TIMESTAMP,
    FOREIGN KEY (campaign_id) REFERENCES campaigns(id) ON DELETE CASCADE,
    FOREIGN KEY (template_id) REFERENCES templates(id) ON DELETE SET NULL
);
CREATE INDEX idx_content_descriptions_campaign_id ON content_descriptions(campaign_id);
CREATE INDEX idx_content_descriptions_platform ON content_descriptions(platform);
CREATE INDEX idx_content_descriptions_scheduled_date ON content_descriptions(scheduled_date);
CREATE INDEX idx_content_descriptions_status ON content_descriptions(status);
CREATE INDEX idx_content_descriptions_campaign_status ON content_descriptions(campaign_id, status);

CREATE TABLE brand_manuals (
    id TEXT PRIMARY KEY DEFAULT (lower(hex(randomblob(16)))),
    workspace_id TEXT NOT NULL,
    brand_voice TEXT NOT NULL,
    brand_values TEXT,  -- JSON array
    target_audience TEXT NOT NULL,
    key_messages TEXT,  -- JSON array
    dos_donts TEXT,  -- JSON object
    color_palette TEXT,  -- JSON array
    typography TEXT,
    created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
    updated_at DATETIME DEFAULT CURRENT_TIMESTAMP,
    FOREIGN KEY (workspace_id) REFERENCES workspaces(id) ON DELETE CASCADE,
    UNIQUE(workspace_id)
);
CREATE INDEX idx_brand_manuals_workspace_id ON brand_manuals(workspace_id);

CREATE TRIGGER update_content_descriptions_updated_at
AFTER UPDATE ON content_descriptions
FOR EACH ROW
BEGIN
    UPDATE content_descriptions SET updated_at = CURRENT_TIMESTAMP WHERE id = NEW.id;
END;

CREATE TRIGGER update_brand_manuals_updated_at
AFTER UPDATE ON brand_manuals
FOR EACH ROW
BEGIN
    UPDATE brand_manuals SET updated_at = CURRENT_TIMESTAMP WHERE id = NEW.id;
END;
""" + "".join(
    f"ALTER TABLE publications ADD COLUMN {name} {ddl};\n" for name, ddl in PUBLICATION_COLUMNS
) + """
CREATE INDEX idx_publications_content_description_id ON publications(content_description_id);
"""

# DROP COLUMN refuses indexed columns, so the index goes first.
SQL_DOWN = """
DROP INDEX IF EXISTS idx_publications_content_description_id;
DROP TRIGGER IF EXISTS update_content_descriptions_updated_at;
DROP TRIGGER IF EXISTS update_brand_manuals_updated_at;
DROP TABLE IF EXISTS content_descriptions;
DROP TABLE IF EXISTS brand_manuals;
""" + "".join(
    f"ALTER TABLE publications DROP COLUMN {name};\n" for name, _ in reversed(PUBLICATION_COLUMNS)
) + "".join(
    f"ALTER TABLE campaigns DROP COLUMN {name};\n" for name, _ in reversed(CAMPAIGN_COLUMNS)
)

MIGRATION = sql_migration(
    version=2,
    description="Add AI content generation tables and extend existing tables",
    sql_up=SQL_UP,
    sql_down=SQL_DOWN,
)
