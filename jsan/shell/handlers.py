"""
Command handlers for the jsan shell.

Each handler takes ``CommandOptions`` and returns a ``CommandResult``.
Handlers raise ``UserInputError`` for bad arguments and let
``BackendError`` from the index or the installer propagate; the
dispatcher turns both into results.
"""

import re
from typing import Dict, Optional

from ..config import ConfigStore
from ..domain import Distribution, Release
from ..exit_codes import UserInputError
from ..index.backend import IndexBackend
from ..infra.installer import Installer
from ..render import (
    format_author,
    format_distribution,
    format_library,
    format_search_results,
)
from .dispatcher import CommandOptions, CommandResult, Handler
from .help import HelpTopics

# Letters, digits and underscores, not starting with a digit
IDENTIFIER = re.compile(r'[^\W\d]\w*')

FORCE_FLAGS = ('-f', '--force')


def is_identifier(value: Optional[str]) -> bool:
    return bool(value) and IDENTIFIER.fullmatch(value) is not None


def _first_param(options: CommandOptions) -> Optional[str]:
    return options.params[0] if options.params else None


class ShellCommands:
    """
    The jsan shell commands, bound to their collaborators.

    Args:
        index: Index backend for record lookups
        help_topics: Help page registry
        installer: Download/install hook; ``get``/``install`` need it
        config_store: Key/value configuration store; ``conf`` needs it
    """

    def __init__(
        self,
        index: IndexBackend,
        help_topics: HelpTopics,
        installer: Optional[Installer] = None,
        config_store: Optional[ConfigStore] = None,
    ):
        self.index = index
        self.help_topics = help_topics
        self.installer = installer
        self.config_store = config_store

    def handlers(self) -> Dict[str, Handler]:
        """Registry of canonical command name to handler."""
        handlers: Dict[str, Handler] = {
            'help': self.command_help,
            'quit': self.command_quit,
            'author': self.command_author,
            'dist': self.command_dist,
            'library': self.command_library,
            'find': self.command_find,
        }
        if self.installer is not None:
            handlers['get'] = self.command_get
            handlers['install'] = self.command_install
        if self.config_store is not None:
            handlers['conf'] = self.command_conf
        return handlers

    # General

    def command_quit(self, options: CommandOptions) -> CommandResult:
        return CommandResult.quit()

    def command_help(self, options: CommandOptions) -> CommandResult:
        topic = _first_param(options) or 'commands'
        page = self.help_topics.get(topic)
        if page is None:
            return CommandResult.user_error(f"No help page for command '{topic}'")
        return CommandResult.show(page)

    # Investigation

    def command_author(self, options: CommandOptions) -> CommandResult:
        login = _first_param(options)
        if not is_identifier(login):
            return CommandResult.user_error("Not a valid author identifier")
        login = login.lower()

        author = self.index.get_author_by_login(login)
        if author is None:
            return CommandResult.user_error(f"Could not find the author '{login}'")

        return CommandResult.show(*format_author(author))

    def command_dist(self, options: CommandOptions) -> CommandResult:
        name = _first_param(options)
        if not name:
            return CommandResult.user_error("Not a valid distribution name")

        dist = self.index.get_distribution_by_name(name)
        if dist is None:
            return CommandResult.user_error(f"Could not find the distribution '{name}'")

        release = self._latest_release(dist)
        author = self.index.get_author(release.author_id)
        libraries = self.index.list_libraries_by_release(release.id)
        return CommandResult.show(*format_distribution(dist, release, author, libraries))

    def command_library(self, options: CommandOptions) -> CommandResult:
        name = _first_param(options)
        if not name:
            return CommandResult.user_error("Not a valid library name")

        library = self.index.get_library_by_name(name)
        if library is None:
            return CommandResult.user_error(f"Could not find the library '{name}'")

        release = self.index.get_release(library.release_id)
        if release is None:
            return CommandResult.user_error(f"The library '{name}' has no release in the index")
        dist = self.index.get_distribution(release.distribution_id)
        author = self.index.get_author(release.author_id)
        libraries = self.index.list_libraries_by_release(release.id)
        return CommandResult.show(*format_library(library, dist, release, author, libraries))

    def command_find(self, options: CommandOptions) -> CommandResult:
        substring = ' '.join(options.params)
        if not substring:
            return CommandResult.user_error("Usage: find SUBSTRING")
        results = self.index.search(substring)
        return CommandResult.show(*format_search_results(substring, results))

    # Download, install

    def command_get(self, options: CommandOptions) -> CommandResult:
        dist, release = self._release_for(_first_param(options))
        path = self.installer.get(dist, release)
        return CommandResult.show(f"Downloaded {dist.name} {release.version or ''} to {path}")

    def command_install(self, options: CommandOptions) -> CommandResult:
        params = [p for p in options.params if p not in FORCE_FLAGS]
        force = options.force or len(params) != len(options.params)

        dist, release = self._release_for(params[0] if params else None)
        files = self.installer.install(dist, release, force=force)
        return CommandResult.show(
            f"Installed {dist.name} {release.version or ''} ({len(files)} files)"
        )

    # Configuration

    def command_conf(self, options: CommandOptions) -> CommandResult:
        params = options.params
        action = params[0] if params else None

        if action == 'get' and len(params) == 2:
            try:
                value = self.config_store.get(params[1])
            except KeyError:
                return CommandResult.user_error(f"No config option '{params[1]}'")
            return CommandResult.show(f"{params[1]} = {value}")

        if action == 'set' and len(params) >= 3:
            value = ' '.join(params[2:])
            try:
                typed = self.config_store.set(params[1], value)
            except KeyError:
                return CommandResult.user_error(f"Cannot set config option '{params[1]}'")
            return CommandResult.show(f"{params[1]} = {typed}")

        return CommandResult.user_error("Usage: conf get OPTION | conf set OPTION VALUE")

    # Helpers

    def _latest_release(self, dist: Distribution) -> Release:
        release = self.index.get_latest_release(dist.id)
        if release is None:
            raise UserInputError(f"The distribution '{dist.name}' has no releases")
        return release

    def _release_for(self, name: Optional[str]):
        if not name:
            raise UserInputError("Not a valid distribution name")
        dist = self.index.get_distribution_by_name(name)
        if dist is None:
            raise UserInputError(f"Could not find the distribution '{name}'")
        return dist, self._latest_release(dist)
