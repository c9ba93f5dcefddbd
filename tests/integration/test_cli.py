"""Integration tests for the rustgres-schema CLI."""
import subprocess
import sys


def run_cli(args, cwd=None):
    """Helper to run the CLI as a subprocess."""
    return subprocess.run(
        [sys.executable, "-m", "rustgres.cli.main"] + args,
        capture_output=True,
        text=True,
        check=False,
        cwd=cwd
    )


def test_cli_generates_profiles_module(fixtures_dir, tmp_path):
    """Test the profiles example end to end."""
    result = run_cli([
        "--from-ddl", str(fixtures_dir / "schema.sql"),
        "--root", str(tmp_path),
        "--table-file", "profiles:profiles",
    ])

    assert result.returncode == 0, result.stderr
    index = (tmp_path / "src" / "schema.rs").read_text(encoding="utf-8")
    module = (tmp_path / "src" / "schema" / "profiles.rs").read_text(encoding="utf-8")

    assert index.startswith("// This file was generated by rustgres-schema\n")
    assert index.endswith("pub mod profiles;\n")
    assert "pub struct Profiles {\n    pub id: i32,\n    pub bio: Option<String>,\n}" in module


def test_cli_output_is_reproducible(fixtures_dir, tmp_path):
    """Test two runs over the same catalog produce identical bytes."""
    first = tmp_path / "first"
    second = tmp_path / "second"
    for root in (first, second):
        result = run_cli([
            "--from-ddl", str(fixtures_dir / "schema.sql"),
            "--root", str(root),
            "-d", "generated",
            "-o", "db.rs",
        ])
        assert result.returncode == 0, result.stderr

    assert (first / "generated" / "db.rs").read_bytes() == \
        (second / "generated" / "db.rs").read_bytes()


def test_cli_missing_ddl_file(tmp_path):
    """Test error handling when the DDL file is missing."""
    result = run_cli(["--from-ddl", str(tmp_path / "missing.sql")])

    assert result.returncode == 1
    assert "Error reading DDL file" in result.stderr


def test_cli_unsupported_type(tmp_path):
    """Test an unmapped column type fails with the column named."""
    ddl = tmp_path / "geo.sql"
    ddl.write_text("CREATE TABLE places (id INT NOT NULL, area GEOMETRY);", encoding="utf-8")

    result = run_cli(["--from-ddl", str(ddl), "--root", str(tmp_path / "out")])

    assert result.returncode == 1
    assert "public.places.area" in result.stderr
    assert not (tmp_path / "out").exists()


def test_cli_help():
    """Test --help lists the table mapping option."""
    result = run_cli(["--help"])

    assert result.returncode == 0
    assert "--table-file" in result.stdout
