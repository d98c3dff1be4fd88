from codewright.config_loader import CodewrightConfig, _deep_merge, load_config


def test_defaults_from_packaged_yaml(monkeypatch):
    monkeypatch.delenv("CODEWRIGHT_MODEL", raising=False)
    config = load_config()

    assert isinstance(config, CodewrightConfig)
    assert config.limits.max_iterations == 10
    assert config.edit.strategy == "similarity"
    assert "git push" in config.blocked_patterns


def test_repo_overrides(tmp_path, monkeypatch):
    monkeypatch.delenv("CODEWRIGHT_MODEL", raising=False)
    (tmp_path / ".codewright").mkdir()
    (tmp_path / ".codewright" / "config.yaml").write_text(
        "limits:\n  max_iterations: 3\nedit:\n  strategy: strict\n",
        encoding="utf-8",
    )
    config = load_config(tmp_path)

    assert config.limits.max_iterations == 3
    assert config.limits.command_timeout == 120
    assert config.edit.strategy == "strict"


def test_model_env_override(tmp_path, monkeypatch):
    monkeypatch.setenv("CODEWRIGHT_MODEL", "openai/gpt-4o")
    assert load_config(tmp_path).routing.agent == "openai/gpt-4o"


def test_deep_merge_keeps_siblings():
    merged = _deep_merge({"a": {"x": 1, "y": 2}, "b": 1}, {"a": {"y": 3}})
    assert merged == {"a": {"x": 1, "y": 3}, "b": 1}
