"""
Build model — plugins, their dependencies and the build sections holding them.

These mirror the parts of a Maven POM the check reads: a build section
carries an optional plugin-management list and an optional plugin list,
and every plugin carries its own dependency declarations.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

# Maven's implicit groupId for <plugin> elements that omit one
DEFAULT_PLUGIN_GROUP = "org.apache.maven.plugins"


def _gav(group_id: str, artifact_id: str, version: str | None) -> str:
    if version:
        return f"{group_id}:{artifact_id}:{version}"
    return f"{group_id}:{artifact_id}"


class Dependency(BaseModel):
    """A <dependency> declared on a plugin."""

    group_id: str
    artifact_id: str
    version: str | None = None
    type: str = "jar"
    classifier: str | None = None
    scope: str | None = None

    model_config = ConfigDict(extra="forbid")  # Reject unknown fields

    @property
    def management_key(self) -> str:
        """Key Maven uses to merge dependency declarations."""
        return f"{self.group_id}:{self.artifact_id}:{self.type}:{self.classifier or ''}"

    def __str__(self) -> str:
        text = _gav(self.group_id, self.artifact_id, self.version)
        if self.type and self.type != "jar":
            text += f":{self.type}"
        if self.classifier:
            text += f":{self.classifier}"
        return text


class Plugin(BaseModel):
    """A <plugin> declaration, managed or direct."""

    group_id: str = DEFAULT_PLUGIN_GROUP
    artifact_id: str
    version: str | None = None
    inherited: bool = True
    dependencies: list[Dependency] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")

    @property
    def key(self) -> str:
        """groupId:artifactId — the identity plugins are merged by."""
        return f"{self.group_id}:{self.artifact_id}"

    def __str__(self) -> str:
        return _gav(self.group_id, self.artifact_id, self.version)


class BuildConfiguration(BaseModel):
    """The <build> section of a project or profile.

    ``None`` for either list means the section was not declared at all,
    which is valid and treated as "no plugins".
    """

    plugin_management: list[Plugin] | None = None
    plugins: list[Plugin] | None = None

    model_config = ConfigDict(extra="forbid")


class PluginIdentity(BaseModel):
    """Coordinates of a plugin, used to recognise the checker's own plugin."""

    group_id: str
    artifact_id: str
    version: str | None = None

    @classmethod
    def parse(cls, text: str) -> PluginIdentity:
        """Parse ``group:artifact[:version]``.

        Raises:
            ValueError: If the string does not have two or three parts.
        """
        parts = [p.strip() for p in text.strip().split(":")]
        if len(parts) not in (2, 3) or not all(parts):
            raise ValueError(f"Expected group:artifact[:version], got {text!r}")
        return cls(
            group_id=parts[0],
            artifact_id=parts[1],
            version=parts[2] if len(parts) == 3 else None,
        )

    def __str__(self) -> str:
        return _gav(self.group_id, self.artifact_id, self.version)
