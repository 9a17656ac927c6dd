from pydantic import BaseModel, Field


class ProjectRules(BaseModel):
    slug: str
    rules_version: str

class ModuleRules(BaseModel):
    slug: str = "cookie-consent-marketing"

class AuthRules(BaseModel):
    admin_roles: list[str] = Field(default_factory=lambda: ["owner", "admin"])
    token_algorithm: str = "HS256"
    token_ttl_minutes: int = 60 * 24

class OpsRules(BaseModel):
    data_dir_required: bool
    required_env: list[str] = Field(default_factory=list)
    migrations_dir: str = "migrations"
    log_level: str = "INFO"

class Rules(BaseModel):
    project: ProjectRules
    module: ModuleRules = Field(default_factory=ModuleRules)
    auth: AuthRules = Field(default_factory=AuthRules)
    ops: OpsRules
