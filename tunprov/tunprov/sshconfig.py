import os
import re
from typing import Iterable, List, Set, Tuple, Union
from .model import TunnelDefinition, SSH_CONFIG_PATH
from .render import Renderer
from .resources import FileWriter, ManagedFile, Change
from .logger import Logger


MARKER = '# managed by tunprov, tunnel'

UPSERT_CREATED = 'created'
UPSERT_UPDATED = 'updated'
UPSERT_UNCHANGED = 'unchanged'
UPSERT_SKIPPED = 'skipped'


class HostBlock(object):
    """
    "Host" or "Match" section of ssh_config(5) with its option lines
    and the comments written directly above it
    """

    header: str
    lines: List[str]
    comments: List[str]

    def __init__(self, header: str, lines: List[str] = None, comments: List[str] = None):
        self.header = header
        self.lines = lines if lines is not None else []
        self.comments = comments if comments is not None else []

    @property
    def keyword(self) -> str:
        return _split_keyword(self.header)[0]

    @property
    def patterns(self) -> List[str]:
        return _split_keyword(self.header)[1].split()

    @property
    def managed(self) -> bool:
        return any(line.strip().startswith(MARKER) for line in self.lines)

    def render(self) -> str:
        return "\n".join(self.comments + [self.header] + self.lines)


class SSHClientConfig(object):
    """
    Structured representation of an SSH client configuration file

    User content (everything before the first section and all unmanaged sections) keeps its order,
    managed sections are always rendered at the end, sorted by host
    """

    preamble: List[str]
    blocks: List[HostBlock]

    def __init__(self, preamble: List[str] = None, blocks: List[HostBlock] = None):
        self.preamble = preamble if preamble is not None else []
        self.blocks = blocks if blocks is not None else []

    @staticmethod
    def parse(content: str) -> 'SSHClientConfig':
        config = SSHClientConfig()
        current = None

        for line in content.splitlines():
            keyword = _split_keyword(line)[0]

            if keyword in ('host', 'match'):
                # comments above a section belong to it, not to the section before
                comments = _pop_trailing_comments(current.lines) if current is not None else []
                current = HostBlock(line, comments=comments)
                config.blocks.append(current)
            elif current is None:
                config.preamble.append(line)
            else:
                current.lines.append(line)

        _strip_trailing_blank_lines(config.preamble)

        for block in config.blocks:
            _strip_trailing_blank_lines(block.lines)

        return config

    def find(self, host: str) -> Union[HostBlock, None]:
        for block in self.blocks:
            if block.keyword == 'host' and block.patterns == [host]:
                return block

        return None

    def upsert(self, host: str, block_content: str) -> str:
        """
        Inserts or replaces the managed section for given host. Sections written by the user are never modified

        :param host:
        :param block_content: rendered "Host <host>" section
        :return: one of UPSERT_* constants
        """

        new_block = SSHClientConfig.parse(block_content).blocks[0]
        existing = self.find(host)

        if existing is None:
            self.blocks.append(new_block)
            return UPSERT_CREATED

        if not existing.managed:
            return UPSERT_SKIPPED

        new_block.comments = existing.comments

        if existing.render() == new_block.render():
            return UPSERT_UNCHANGED

        self.blocks[self.blocks.index(existing)] = new_block
        return UPSERT_UPDATED

    def drop_managed(self, keep: Iterable[str]) -> List[str]:
        """
        Removes managed sections of hosts not listed in keep. Comments written above a removed section stay

        :param keep: hosts that still have a managed section
        :return: removed hosts
        """

        keep = set(keep)
        removed = []

        for block in list(self.blocks):
            host = ' '.join(block.patterns)

            if not block.managed or host in keep:
                continue

            if block.comments:
                self.preamble.extend([''] + block.comments if self.preamble else block.comments)

            self.blocks.remove(block)
            removed.append(host)

        return removed

    def render(self) -> str:
        sections = []

        if self.preamble:
            sections.append("\n".join(self.preamble))

        for block in self.blocks:
            if not block.managed:
                sections.append(block.render())

        for block in sorted([block for block in self.blocks if block.managed], key=lambda b: b.patterns):
            sections.append(block.render())

        if not sections:
            return ''

        return "\n\n".join(sections) + "\n"


class SSHConfigContributor(object):
    """
    Adds a "Host" section per (user, remote host) to the user's ~/.ssh/config

    The first tunnel in a run wins the section, next tunnels for the same key are skipped
    """

    _seen: Set[Tuple[str, str]]

    def __init__(self, writer: FileWriter, renderer: Renderer):
        self._writer = writer
        self._renderer = renderer
        self._seen = set()

    def reset(self):
        self._seen = set()

    def contribute(self, definition: TunnelDefinition) -> Union[Change, None]:
        key = definition.ssh_config_key

        if key in self._seen:
            Logger.info('SSH config for %s@%s already contributed in this run, skipping %s' % (
                key[0], key[1], definition.name))
            return None

        self._seen.add(key)

        path = definition.ssh_config_path
        config = SSHClientConfig.parse(self._writer.read(path) or '')
        result = config.upsert(
            definition.remote_ssh_host,
            self._renderer.render_ssh_config_block(definition, MARKER)
        )

        if result == UPSERT_SKIPPED:
            Logger.warning('%s already contains a "Host %s" section not managed by tunprov, leaving it untouched' % (
                path, definition.remote_ssh_host))
            return None

        self._ensure_ssh_directory(os.path.dirname(path), definition.user)

        return self._writer.apply(ManagedFile(
            path=path, content=config.render(), mode=0o600, owner=definition.user, group=definition.user
        ))

    def prune(self, user: str, keep: Iterable[str]) -> Union[Change, None]:
        """
        Drops managed sections of the user's ssh config whose host is not declared anymore

        :param user: owner of ~/.ssh/config
        :param keep: remote hosts that still request a section for this user
        """

        path = SSH_CONFIG_PATH % user
        content = self._writer.read(path)

        if content is None:
            return None

        config = SSHClientConfig.parse(content)
        removed = config.drop_managed(keep)

        if not removed:
            return None

        Logger.info('Dropping stale SSH config sections from %s: %s' % (path, ', '.join(removed)))

        return self._writer.apply(ManagedFile(
            path=path, content=config.render(), mode=0o600, owner=user, group=user
        ))

    def _ensure_ssh_directory(self, path: str, user: str):
        if self._writer.dry_run or self._writer.exists(path):
            return

        Logger.info('Creating %s' % path)
        self._writer.ensure_directory(path, mode=0o700, owner=user, group=user)


def _split_keyword(line: str) -> Tuple[str, str]:
    parts = re.split(r'[\s=]+', line.strip(), maxsplit=1)

    if not parts[0] or parts[0].startswith('#'):
        return '', ''

    return parts[0].lower(), parts[1] if len(parts) > 1 else ''


def _strip_trailing_blank_lines(lines: List[str]):
    while lines and not lines[-1].strip():
        lines.pop()


def _pop_trailing_comments(lines: List[str]) -> List[str]:
    start = len(lines)

    while start > 0:
        line = lines[start - 1].strip()

        if (line and not line.startswith('#')) or line.startswith(MARKER):
            break

        start -= 1

    comments = lines[start:]
    del lines[start:]

    while comments and not comments[0].strip():
        comments.pop(0)

    _strip_trailing_blank_lines(comments)

    return comments
