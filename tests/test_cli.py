import json

from models import storage
from models.member import Member
from utils.principal import Role

from conftest import PASSWORD, login_member


def _members_by_email(email):
    return storage.get_session().query(Member).filter(Member.email == email).all()


def test_create_supervisor_from_options(app, client):
    result = app.test_cli_runner().invoke(
        args=[
            "create-supervisor",
            "--email", "Boss@Example.com",
            "--first-name", "Ada",
            "--last-name", "Lovelace",
            "--password", PASSWORD,
        ]
    )
    assert result.exit_code == 0, result.output
    assert "created supervisor boss@example.com" in result.output

    [member] = _members_by_email("boss@example.com")
    assert member.role is Role.SUPERVISOR
    assert login_member(client, "boss@example.com").status_code == 200


def test_create_supervisors_from_file(app, tmp_path):
    path = tmp_path / "supervisors.json"
    path.write_text(json.dumps([
        {"firstName": "A", "lastName": "One", "email": "one@example.com", "password": PASSWORD},
        {"firstName": "B", "lastName": "Two", "email": "two@example.com", "password": PASSWORD},
    ]))

    result = app.test_cli_runner().invoke(args=["create-supervisor", "--file", str(path), "--delete-file"])
    assert result.exit_code == 0, result.output
    assert len(_members_by_email("one@example.com")) == 1
    assert len(_members_by_email("two@example.com")) == 1
    assert not path.exists()


def test_existing_email_is_skipped(app, supervisor):
    result = app.test_cli_runner().invoke(
        args=["create-supervisor", "--email", "sue@example.com", "--first-name", "S", "--last-name", "V",
              "--password", PASSWORD]
    )
    assert result.exit_code == 0
    assert len(_members_by_email("sue@example.com")) == 1


def test_requires_file_or_identity(app):
    result = app.test_cli_runner().invoke(args=["create-supervisor"])
    assert result.exit_code != 0
