"""Stored AI analyses of resources and templates."""

from campaigndb.infrastructure.database.migrations.sql_migration import sql_migration

SQL_UP = """
CREATE TABLE resource_analyses (
    id TEXT PRIMARY KEY DEFAULT (lower(hex(randomblob(16)))),
    resource_id TEXT NOT NULL,
    workspace_id TEXT NOT NULL,
    campaign_id TEXT,
    visual_analysis TEXT NOT NULL,
    semantic_analysis TEXT,
    analysis_version TEXT NOT NULL DEFAULT '1.0',
    created_at DATETIME NOT NULL DEFAULT CURRENT_TIMESTAMP,
    updated_at DATETIME NOT NULL DEFAULT CURRENT_TIMESTAMP,
    FOREIGN KEY (resource_id) REFERENCES resources(id) ON DELETE CASCADE,
    FOREIGN KEY (workspace_id) REFERENCES workspaces(id) ON DELETE CASCADE,
    FOREIGN KEY (campaign_id) REFERENCES campaigns(id) ON DELETE SET NULL
);

CREATE TABLE template_analyses (
    id TEXT PRIMARY KEY DEFAULT (lower(hex(randomblob(16)))),
    template_id TEXT NOT NULL,
    workspace_id TEXT NOT NULL,
    campaign_id TEXT,
    semantic_analysis TEXT NOT NULL,
    analysis_version TEXT NOT NULL DEFAULT '1.0',
    created_at DATETIME NOT NULL DEFAULT CURRENT_TIMESTAMP,
    updated_at DATETIME NOT NULL DEFAULT CURRENT_TIMESTAMP,
    FOREIGN KEY (template_id) REFERENCES templates(id) ON DELETE CASCADE,
    FOREIGN KEY (workspace_id) REFERENCES workspaces(id) ON DELETE CASCADE,
    FOREIGN KEY (campaign_id) REFERENCES campaigns(id) ON DELETE SET NULL
);

CREATE INDEX idx_resource_analyses_resource_id ON resource_analyses(resource_id);
CREATE INDEX idx_resource_analyses_workspace_id ON resource_analyses(workspace_id);
CREATE INDEX idx_resource_analyses_campaign_id ON resource_analyses(campaign_id);
CREATE INDEX idx_resource_analyses_version ON resource_analyses(analysis_version);
CREATE INDEX idx_resource_analyses_resource_workspace ON resource_analyses(resource_id, workspace_id);

CREATE INDEX idx_template_analyses_template_id ON template_analyses(template_id);
CREATE INDEX idx_template_analyses_workspace_id ON template_analyses(workspace_id);
CREATE INDEX idx_template_analyses_campaign_id ON template_analyses(campaign_id);
CREATE INDEX idx_template_analyses_version ON template_analyses(analysis_version);
CREATE INDEX idx_template_analyses_template_workspace ON template_analyses(template_id, workspace_id);
"""

SQL_DOWN = """
DROP TABLE IF EXISTS template_analyses;
DROP TABLE IF EXISTS resource_analyses;
"""

MIGRATION = sql_migration(
    version=3,
    description="Create analysis tables for resource and template analyses",
    sql_up=SQL_UP,
    sql_down=SQL_DOWN,
)
