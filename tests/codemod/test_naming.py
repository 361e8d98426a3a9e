import pytest

from tracewrap.codemod.naming import resolve_name


@pytest.mark.parametrize(
    "identifier,pattern,expected",
    [
        ("createUser", None, "createUser"),
        ("createUser", "", "createUser"),
        ("createUser", "{name}", "createUser"),
        ("createUser", "{file}.{name}", "users.createUser"),
        ("UserService.create", "svc:{name}", "svc:UserService.create"),
        ("createUser", "{path}#{name}", "src/api/users.ts#createUser"),
        ("createUser", "{name}-{name}", "createUser-createUser"),
        ("createUser", "{other}.{name}", "{other}.createUser"),
        ("createUser", "static-name", "static-name"),
    ],
)
def test_resolve_name(identifier, pattern, expected):
    assert resolve_name(identifier, "/repo/src/api/users.ts", pattern, root="/repo") == expected


def test_substituted_text_is_not_expanded_again():
    assert resolve_name("{file}", "/repo/src/users.ts", "{name}/{file}") == "{file}/users"


def test_file_token_strips_only_last_extension():
    assert resolve_name("a", "/repo/src/users.service.ts", "{file}") == "users.service"


def test_path_without_root_is_the_given_path():
    assert resolve_name("a", "src/users.ts", "{path}") == "src/users.ts"
