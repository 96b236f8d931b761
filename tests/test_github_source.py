"""Tests for GitHubSource repository listing."""

from __future__ import annotations

from unittest.mock import Mock, patch

import github
import pytest

from config import CloneMethod, GitHubConfig
from errors import AuthenticationError, SourceUnavailableError
import github_source
from github_source import GitHubSource


def _gh_repo(name: str, **kwargs) -> Mock:
    repo = Mock()
    repo.name = name
    repo.ssh_url = f'git@github.com:octo/{name}.git'
    repo.clone_url = f'https://github.com/octo/{name}.git'
    repo.fork = kwargs.get('fork', False)
    repo.archived = kwargs.get('archived', False)
    repo.private = kwargs.get('private', False)
    repo.description = kwargs.get('description')
    return repo


def _make_source(clone_method: CloneMethod = CloneMethod.SSH) -> GitHubSource:
    source = GitHubSource(
        GitHubConfig(api_url='https://api.github.com', token='gh-token'), clone_method
    )
    source.api = Mock()
    source.login = 'octo'
    source.rate_limiter.wait_if_needed = lambda *_args, **_kwargs: None
    return source


def test_list_repositories_maps_fields() -> None:
    source = _make_source()
    source.api.get_user.return_value.get_repos.return_value = [
        _gh_repo('plain', description='hello'),
        _gh_repo('forked', fork=True, private=True),
        _gh_repo('old', archived=True),
    ]

    repos = source.list_repositories()

    assert [r.name for r in repos] == ['plain', 'forked', 'old']
    assert repos[0].clone_url == 'git@github.com:octo/plain.git'
    assert repos[0].description == 'hello'
    assert repos[1].is_fork is True and repos[1].is_private is True
    assert repos[1].description == ''
    assert repos[2].is_archived is True
    source.api.get_user.return_value.get_repos.assert_called_once_with(
        affiliation='owner'
    )


def test_https_clone_method_uses_clone_url() -> None:
    source = _make_source(CloneMethod.HTTPS)
    source.api.get_user.return_value.get_repos.return_value = [_gh_repo('demo')]

    repos = source.list_repositories()

    assert repos[0].clone_url == 'https://github.com/octo/demo.git'


def test_own_login_uses_authenticated_listing() -> None:
    source = _make_source()
    source.api.get_user.return_value.get_repos.return_value = []

    source.list_repositories('OCTO')

    source.api.get_user.assert_called_with()


def test_other_user_lists_owned_repositories() -> None:
    source = _make_source()
    account = Mock(type='User')
    account.get_repos.return_value = [_gh_repo('theirs')]
    source.api.get_user.return_value = account

    repos = source.list_repositories('someone')

    source.api.get_user.assert_called_with('someone')
    account.get_repos.assert_called_once_with(type='owner')
    assert [r.name for r in repos] == ['theirs']


def test_organization_lists_org_repositories() -> None:
    source = _make_source()
    source.api.get_user.return_value = Mock(type='Organization')
    source.api.get_organization.return_value.get_repos.return_value = [_gh_repo('team')]

    repos = source.list_repositories('acme')

    source.api.get_organization.assert_called_once_with('acme')
    assert [r.name for r in repos] == ['team']


def test_listing_is_capped(monkeypatch) -> None:
    monkeypatch.setattr(github_source, 'MAX_REPOSITORIES', 3)
    source = _make_source()
    source.api.get_user.return_value.get_repos.return_value = iter(
        _gh_repo(f'r{i}') for i in range(10)
    )

    repos = source.list_repositories()

    assert [r.name for r in repos] == ['r0', 'r1', 'r2']


def test_listing_api_error_raises_source_unavailable() -> None:
    source = _make_source()
    source.api.get_user.return_value.get_repos.side_effect = github.GithubException(
        502, {'message': 'Bad Gateway'}, None
    )

    with pytest.raises(SourceUnavailableError):
        source.list_repositories()


def test_unknown_account_raises_source_unavailable() -> None:
    source = _make_source()
    source.api.get_user.side_effect = github.UnknownObjectException(
        404, {'message': 'Not Found'}, None
    )

    with pytest.raises(SourceUnavailableError, match='not found'):
        source.list_repositories('ghost')


def test_list_before_connect_raises() -> None:
    source = GitHubSource(GitHubConfig(api_url='https://api.github.com', token='t'))

    with pytest.raises(SourceUnavailableError):
        source.list_repositories()


@patch('github_source.github.Github')
def test_connect_bad_credentials_raises_authentication_error(mock_github: Mock) -> None:
    mock_github.return_value.get_user.side_effect = github.BadCredentialsException(
        401, {'message': 'Bad credentials'}, None
    )
    source = GitHubSource(GitHubConfig(api_url='https://api.github.com', token='bad'))
    source.rate_limiter.wait_if_needed = lambda *_args, **_kwargs: None

    with pytest.raises(AuthenticationError) as excinfo:
        source.connect()
    assert 'GITHUB_TOKEN' in excinfo.value.hint


@patch('github_source.github.Github')
def test_connect_enterprise_uses_base_url(mock_github: Mock) -> None:
    mock_github.return_value.get_user.return_value.login = 'octo'
    source = GitHubSource(
        GitHubConfig(api_url='https://github.acme.com/api/v3', token='t')
    )
    source.rate_limiter.wait_if_needed = lambda *_args, **_kwargs: None

    source.connect()

    assert mock_github.call_args.kwargs['base_url'] == 'https://github.acme.com/api/v3'
    assert source.login == 'octo'
