import json
import logging

import pytest

from conftest import write_source
from nestdeps.cli import main
from nestdeps.config import load_config
from nestdeps.extractors.base import Extractor
from nestdeps.extractors.nest.scan import NestModuleExtractor
from nestdeps.pipeline import analyze, normalize_format, run


def test_analyze_links_project(nest_project):
    graph = analyze(nest_project)
    src = nest_project.resolve() / "src"

    assert list(graph.modules) == ["AppModule", "AuthModule", "UsersModule"]

    app = graph.modules["AppModule"]
    assert app.file_path == str(src / "app.module.ts")
    assert app.entity_count == 2
    assert app.controllers == ["AppController"]
    config, typeorm, users, auth = app.imports
    assert (config.name, config.path, config.module) == ("ConfigModule", None, None)
    assert (typeorm.name, typeorm.path, typeorm.is_async) == ("TypeOrmModule", None, True)
    assert users.path == str(src / "users" / "users.module.ts")
    assert users.module.name == "UsersModule"
    assert [p.name for p in users.module.providers] == ["UsersService", "USERS_REPOSITORY"]
    assert auth.module.controllers == []

    users_module = graph.modules["UsersModule"]
    assert users_module.entity_count == 1
    forward = users_module.imports[1]
    assert forward.name == "AuthModule"
    assert forward.is_forward_reference is True
    assert forward.path == str(src / "auth" / "auth.module.ts")
    repository = users_module.providers[1]
    assert repository.type == "factory"
    assert repository.dependencies == ["DATA_SOURCE"]

    auth_module = graph.modules["AuthModule"]
    auth_service, secret = auth_module.providers
    assert auth_service.is_injectable is True
    assert auth_service.dependencies == ["UsersService", "JwtService"]
    assert secret.type == "value"
    assert secret.use_value == "secret"


def test_later_module_with_same_name_wins(tmp_path, caplog):
    write_source(tmp_path / "a" / "shared.module.ts", "@Module({ controllers: [First] })\nexport class SharedModule {}\n")
    write_source(tmp_path / "b" / "shared.module.ts", "@Module({ controllers: [Second] })\nexport class SharedModule {}\n")

    with caplog.at_level(logging.WARNING, logger="nestdeps"):
        graph = analyze(tmp_path)

    assert list(graph.modules) == ["SharedModule"]
    assert graph.modules["SharedModule"].controllers == ["Second"]
    assert "replaces" in caplog.text


def test_non_module_files_are_ignored(tmp_path):
    write_source(tmp_path / "cats.service.ts", "@Module({})\nexport class NotScanned {}\n")
    write_source(tmp_path / "cats.module.ts", "export const nothing = 1;\n")

    graph = analyze(tmp_path)

    assert graph.modules == {}


def test_undecodable_bytes_do_not_abort_the_run(tmp_path):
    write_source(tmp_path / "a.module.ts", "@Module({})\nexport class AModule {}\n")
    (tmp_path / "b.module.ts").write_bytes(
        b"// \xa9 2024 ACME\n@Module({ controllers: [BController] })\nexport class BModule {}\n"
    )

    graph = analyze(tmp_path)

    assert list(graph.modules) == ["AModule", "BModule"]
    assert graph.modules["BModule"].controllers == ["BController"]


def test_symlinked_directories_are_not_followed(nest_project, caplog):
    (nest_project / "src" / "loop").symlink_to(nest_project / "src", target_is_directory=True)

    with caplog.at_level(logging.WARNING, logger="nestdeps"):
        graph = analyze(nest_project)

    assert list(graph.modules) == ["AppModule", "AuthModule", "UsersModule"]
    assert "replaces" not in caplog.text


def test_extractor_handles_directories_only(tmp_path):
    extractor: Extractor = NestModuleExtractor()
    (tmp_path / "app.module.ts").write_text("")

    assert extractor.can_handle(tmp_path) is True
    assert extractor.can_handle(tmp_path / "app.module.ts") is False
    assert extractor.can_handle(tmp_path / "missing") is False


def test_config_excludes_directories(nest_project):
    (nest_project / ".nestdeps.toml").write_text('[nestdeps]\nexclude = ["auth"]\n')

    graph = analyze(nest_project)

    assert "AuthModule" not in graph.modules
    assert graph.modules["UsersModule"].imports[1].module is None
    assert graph.modules["UsersModule"].imports[1].path is None


def test_config_from_package_json(tmp_path):
    (tmp_path / "package.json").write_text(
        json.dumps({"name": "cats-api", "nestdeps": {"suffix": ".mod.ts"}})
    )
    write_source(tmp_path / "cats.mod.ts", "@Module({})\nexport class CatsModule {}\n")

    assert load_config(tmp_path).suffix == ".mod.ts"
    graph = analyze(tmp_path)
    assert graph.project_name == "cats-api"
    assert list(graph.modules) == ["CatsModule"]


def test_malformed_config_is_ignored(tmp_path):
    (tmp_path / ".nestdeps.toml").write_text("[nestdeps\nexclude = ")

    config = load_config(tmp_path)

    assert config.exclude == []
    assert config.suffix == ".module.ts"


def test_missing_project_directory_is_fatal(tmp_path):
    with pytest.raises(OSError):
        analyze(tmp_path / "missing")


def test_unknown_format_falls_back_to_json():
    assert normalize_format("DOT") == "dot"
    assert normalize_format("yaml") == "json"
    assert normalize_format(None) == "json"


def test_run_writes_json_output(nest_project, tmp_path):
    out = tmp_path / "reports" / "graph.json"

    text = run(nest_project, fmt="json", output=out)

    assert out.read_text(encoding="utf-8") == text
    assert [name for name, _ in json.loads(text)] == ["AppModule", "AuthModule", "UsersModule"]


def test_cli_prints_dot(nest_project, capsys):
    main(["-p", str(nest_project), "-f", "dot"])

    out = capsys.readouterr().out
    assert out.startswith("digraph {")
    assert (
        '"UsersModule" -> "AuthModule" [label="imports (forward ref)", style=dashed, color=red];'
    ) in out


def test_cli_unknown_format_prints_json(nest_project, capsys):
    main(["--path", str(nest_project), "--format", "xml"])

    pairs = json.loads(capsys.readouterr().out)
    assert pairs[0][0] == "AppModule"


def test_cli_writes_dot_file(nest_project, tmp_path, monkeypatch, capsys):
    monkeypatch.setattr("nestdeps.renderer.dot.shutil.which", lambda _: None)
    out = tmp_path / "graph.dot"

    main(["-p", str(nest_project), "-f", "dot", "-o", str(out)])

    assert out.read_text(encoding="utf-8").startswith("digraph {")
    assert capsys.readouterr().out == ""


def test_cli_exits_non_zero_on_io_failure(tmp_path):
    with pytest.raises(SystemExit) as excinfo:
        main(["-p", str(tmp_path / "missing")])

    assert excinfo.value.code == 1
