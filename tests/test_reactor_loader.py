"""
Tests for reactor loading — module discovery, inheritance, plugin
management and interpolation.
"""

import textwrap
from pathlib import Path

import pytest

from snapguard.core.config.reactor_loader import (
    ReactorError,
    discover_poms,
    interpolate,
    load_reactor,
)
from snapguard.core.services.snapshot_check import scan_project

ENFORCER = "org.apache.maven.plugins:maven-enforcer-plugin:3.4.1"
EXEC = "org.codehaus.mojo:exec-maven-plugin:3.1.0"

ROOT_POM = """\
    <project xmlns="http://maven.apache.org/POM/4.0.0">
      <groupId>com.acme</groupId>
      <artifactId>parent</artifactId>
      <version>1.0-SNAPSHOT</version>
      <packaging>pom</packaging>
      <properties>
        <rules.version>3.0-SNAPSHOT</rules.version>
      </properties>
      <modules>
        <module>core</module>
        <module>app</module>
      </modules>
      <build>
        <pluginManagement>
          <plugins>
            <plugin>
              <artifactId>maven-enforcer-plugin</artifactId>
              <version>3.4.1</version>
              <dependencies>
                <dependency>
                  <groupId>com.acme</groupId>
                  <artifactId>rules</artifactId>
                  <version>${rules.version}</version>
                </dependency>
              </dependencies>
            </plugin>
          </plugins>
        </pluginManagement>
        <plugins>
          <plugin>
            <artifactId>maven-enforcer-plugin</artifactId>
          </plugin>
          <plugin>
            <groupId>org.codehaus.mojo</groupId>
            <artifactId>exec-maven-plugin</artifactId>
            <version>3.1.0</version>
            <inherited>false</inherited>
            <dependencies>
              <dependency>
                <groupId>x</groupId>
                <artifactId>y</artifactId>
                <version>1-SNAPSHOT</version>
              </dependency>
            </dependencies>
          </plugin>
        </plugins>
      </build>
      <profiles>
        <profile>
          <id>root-only</id>
        </profile>
      </profiles>
    </project>
"""

CORE_POM = """\
    <project xmlns="http://maven.apache.org/POM/4.0.0">
      <parent>
        <groupId>com.acme</groupId>
        <artifactId>parent</artifactId>
        <version>1.0-SNAPSHOT</version>
      </parent>
      <artifactId>core</artifactId>
      <build>
        <plugins>
          <plugin>
            <groupId>com.acme</groupId>
            <artifactId>gen-plugin</artifactId>
            <version>${project.version}</version>
            <dependencies>
              <dependency>
                <groupId>com.acme</groupId>
                <artifactId>gen-templates</artifactId>
                <version>${project.version}</version>
              </dependency>
            </dependencies>
          </plugin>
        </plugins>
      </build>
      <profiles>
        <profile>
          <id>release</id>
          <build>
            <pluginManagement>
              <plugins>
                <plugin>
                  <artifactId>maven-gpg-plugin</artifactId>
                  <version>3.1.0</version>
                  <dependencies>
                    <dependency>
                      <groupId>org.bouncycastle</groupId>
                      <artifactId>bcpg</artifactId>
                      <version>${bc.version}</version>
                    </dependency>
                  </dependencies>
                </plugin>
              </plugins>
            </pluginManagement>
          </build>
        </profile>
      </profiles>
    </project>
"""

APP_POM = """\
    <project xmlns="http://maven.apache.org/POM/4.0.0">
      <parent>
        <groupId>com.acme</groupId>
        <artifactId>parent</artifactId>
        <version>1.0-SNAPSHOT</version>
      </parent>
      <artifactId>app</artifactId>
      <version>2.0</version>
    </project>
"""


@pytest.fixture
def reactor_dir(tmp_path: Path, write_pom) -> Path:
    write_pom(tmp_path, ROOT_POM)
    write_pom(tmp_path / "core", CORE_POM)
    write_pom(tmp_path / "app", APP_POM)
    return tmp_path


class TestDiscovery:
    def test_parent_first_declaration_order(self, reactor_dir: Path):
        poms = discover_poms(reactor_dir / "pom.xml")
        assert [p.artifact_id for p in poms] == ["parent", "core", "app"]

    def test_missing_module(self, tmp_path: Path, write_pom):
        write_pom(tmp_path, """\
            <project>
              <groupId>g</groupId><artifactId>root</artifactId><version>1</version>
              <modules><module>ghost</module></modules>
            </project>
        """)
        with pytest.raises(ReactorError, match="ghost"):
            discover_poms(tmp_path / "pom.xml")

    def test_module_cycle(self, tmp_path: Path, write_pom):
        write_pom(tmp_path, """\
            <project>
              <groupId>g</groupId><artifactId>root</artifactId><version>1</version>
              <modules><module>sub</module></modules>
            </project>
        """)
        write_pom(tmp_path / "sub", """\
            <project>
              <groupId>g</groupId><artifactId>sub</artifactId><version>1</version>
              <modules><module>..</module></modules>
            </project>
        """)
        with pytest.raises(ReactorError, match="cycle"):
            discover_poms(tmp_path / "pom.xml")

    def test_invalid_module_pom(self, tmp_path: Path, write_pom):
        write_pom(tmp_path, """\
            <project>
              <groupId>g</groupId><artifactId>root</artifactId><version>1</version>
              <modules><module>bad</module></modules>
            </project>
        """)
        (tmp_path / "bad").mkdir()
        (tmp_path / "bad" / "pom.xml").write_text("<project>")
        with pytest.raises(ReactorError, match="Invalid XML"):
            discover_poms(tmp_path / "pom.xml")


class TestEffectiveModel:
    def test_identities(self, reactor_dir: Path):
        projects = load_reactor(reactor_dir)
        assert [p.identity for p in projects] == [
            "com.acme:parent:1.0-SNAPSHOT",
            "com.acme:core:1.0-SNAPSHOT",
            "com.acme:app:2.0",
        ]

    def test_management_injected_into_direct_plugin(self, reactor_dir: Path):
        parent = load_reactor(reactor_dir)[0]
        enforcer = next(p for p in parent.build.plugins if p.artifact_id == "maven-enforcer-plugin")
        assert enforcer.version == "3.4.1"
        assert [str(d) for d in enforcer.dependencies] == ["com.acme:rules:3.0-SNAPSHOT"]

    def test_parent_violations(self, reactor_dir: Path):
        parent = load_reactor(reactor_dir)[0]
        assert scan_project(parent) == {
            ENFORCER: {"com.acme:rules:3.0-SNAPSHOT"},
            EXEC: {"x:y:1-SNAPSHOT"},
        }

    def test_child_inherits_management_and_plugins(self, reactor_dir: Path):
        core = load_reactor(reactor_dir)[1]
        assert scan_project(core) == {
            ENFORCER: {"com.acme:rules:3.0-SNAPSHOT"},
            "com.acme:gen-plugin:1.0-SNAPSHOT": {"com.acme:gen-templates:1.0-SNAPSHOT"},
        }

    def test_non_inherited_plugin_stays_in_parent(self, reactor_dir: Path):
        core = load_reactor(reactor_dir)[1]
        assert all(p.artifact_id != "exec-maven-plugin" for p in core.build.plugins)

    def test_child_without_build_inherits(self, reactor_dir: Path):
        app = load_reactor(reactor_dir)[2]
        assert app.build is not None
        assert scan_project(app) == {ENFORCER: {"com.acme:rules:3.0-SNAPSHOT"}}

    def test_profiles_not_inherited(self, reactor_dir: Path):
        parent, core, app = load_reactor(reactor_dir)
        assert [p.id for p in parent.profiles] == ["root-only"]
        assert [p.id for p in core.profiles] == ["release"]
        assert app.profiles == []

    def test_unresolved_expression_kept(self, reactor_dir: Path):
        core = load_reactor(reactor_dir)[1]
        gpg = core.get_profile("release").build.plugin_management[0]
        assert gpg.dependencies[0].version == "${bc.version}"

    def test_child_overrides_property(self, tmp_path: Path, write_pom):
        write_pom(tmp_path, ROOT_POM.replace(
            "<module>app</module>", "",
        ).replace("<module>core</module>", "<module>child</module>"))
        write_pom(tmp_path / "child", """\
            <project>
              <parent>
                <groupId>com.acme</groupId>
                <artifactId>parent</artifactId>
                <version>1.0-SNAPSHOT</version>
              </parent>
              <artifactId>child</artifactId>
              <properties>
                <rules.version>3.0</rules.version>
              </properties>
            </project>
        """)
        child = load_reactor(tmp_path)[1]
        assert scan_project(child) == {}

    def test_child_overrides_plugin_dependency(self, tmp_path: Path, write_pom):
        write_pom(tmp_path, ROOT_POM.replace(
            "<module>app</module>", "",
        ).replace("<module>core</module>", "<module>child</module>"))
        write_pom(tmp_path / "child", """\
            <project>
              <parent>
                <groupId>com.acme</groupId>
                <artifactId>parent</artifactId>
                <version>1.0-SNAPSHOT</version>
              </parent>
              <artifactId>child</artifactId>
              <build>
                <pluginManagement>
                  <plugins>
                    <plugin>
                      <artifactId>maven-enforcer-plugin</artifactId>
                      <dependencies>
                        <dependency>
                          <groupId>com.acme</groupId>
                          <artifactId>rules</artifactId>
                          <version>3.0</version>
                        </dependency>
                      </dependencies>
                    </plugin>
                  </plugins>
                </pluginManagement>
              </build>
            </project>
        """)
        child = load_reactor(tmp_path)[1]
        managed = child.build.plugin_management[0]
        assert managed.version == "3.4.1"
        assert [str(d) for d in managed.dependencies] == ["com.acme:rules:3.0"]
        assert scan_project(child) == {}

    def test_external_parent(self, tmp_path: Path, write_pom):
        write_pom(tmp_path, """\
            <project>
              <parent>
                <groupId>org.external</groupId>
                <artifactId>corp-parent</artifactId>
                <version>12</version>
                <relativePath/>
              </parent>
              <artifactId>solo</artifactId>
            </project>
        """)
        [project] = load_reactor(tmp_path / "pom.xml")
        assert project.identity == "org.external:solo:12"
        assert project.build is None

    def test_missing_group_id(self, tmp_path: Path, write_pom):
        write_pom(tmp_path, "<project><artifactId>a</artifactId></project>")
        with pytest.raises(ReactorError, match="groupId"):
            load_reactor(tmp_path)

    def test_project_path_recorded(self, reactor_dir: Path):
        projects = load_reactor(reactor_dir)
        assert projects[1].path == str((reactor_dir / "core" / "pom.xml").resolve())


class TestInterpolate:
    def test_plain_value(self):
        assert interpolate("1.0", {}) == "1.0"

    def test_none(self):
        assert interpolate(None, {"a": "b"}) is None

    def test_nested(self):
        ctx = {"a": "${b}-SNAPSHOT", "b": "1.0"}
        assert interpolate("${a}", ctx) == "1.0-SNAPSHOT"

    def test_unknown_left_verbatim(self):
        assert interpolate("${missing}", {}) == "${missing}"

    def test_self_reference_terminates(self):
        assert interpolate("${a}", {"a": "${a}"}) == "${a}"


class TestDescriptor:
    def test_yaml_descriptor(self, tmp_path: Path):
        path = tmp_path / "reactor.yml"
        path.write_text(textwrap.dedent("""\
            projects:
              - group_id: com.acme
                artifact_id: app
                version: "1.0"
                build:
                  plugins:
                    - group_id: group
                      artifact_id: pluginA
                      version: "1.0"
                      dependencies:
                        - group_id: group
                          artifact_id: lib
                          version: 2.0-SNAPSHOT
        """))
        [project] = load_reactor(path)
        assert project.identity == "com.acme:app:1.0"
        assert scan_project(project) == {"group:pluginA:1.0": {"group:lib:2.0-SNAPSHOT"}}

    def test_json_descriptor_list(self, tmp_path: Path):
        path = tmp_path / "reactor.json"
        path.write_text('[{"group_id": "g", "artifact_id": "a", "version": "1"}]')
        [project] = load_reactor(path)
        assert project.build is None

    def test_empty_descriptor(self, tmp_path: Path):
        path = tmp_path / "reactor.yml"
        path.write_text("")
        assert load_reactor(path) == []

    def test_invalid_project(self, tmp_path: Path):
        path = tmp_path / "reactor.yml"
        path.write_text("projects:\n  - group_id: g\n")
        with pytest.raises(ReactorError, match="Invalid project"):
            load_reactor(path)

    def test_empty_projects_list(self, tmp_path: Path):
        path = tmp_path / "reactor.yml"
        path.write_text("projects: []\n")
        assert load_reactor(path) == []

    def test_mapping_without_projects_key(self, tmp_path: Path):
        path = tmp_path / "reactor.yml"
        path.write_text("project:\n  - group_id: g\n    artifact_id: a\n")
        with pytest.raises(ReactorError, match="has no 'projects' list"):
            load_reactor(path)

    def test_maven_style_key_rejected(self, tmp_path: Path):
        path = tmp_path / "reactor.yml"
        path.write_text(textwrap.dedent("""\
            projects:
              - group_id: com.acme
                artifact_id: app
                build:
                  pluginManagement:
                    - group_id: group
                      artifact_id: pluginA
                      dependencies:
                        - group_id: group
                          artifact_id: lib
                          version: 2.0-SNAPSHOT
        """))
        with pytest.raises(ReactorError, match="Invalid project"):
            load_reactor(path)

    def test_not_a_list(self, tmp_path: Path):
        path = tmp_path / "reactor.yml"
        path.write_text("projects: 42\n")
        with pytest.raises(ReactorError, match="Expected a list"):
            load_reactor(path)


class TestLoadReactor:
    def test_missing_path(self, tmp_path: Path):
        with pytest.raises(ReactorError, match="not found"):
            load_reactor(tmp_path / "nope.xml")

    def test_directory_without_pom(self, tmp_path: Path):
        with pytest.raises(ReactorError, match="not found"):
            load_reactor(tmp_path)
