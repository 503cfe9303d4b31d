import os
from jinja2 import Environment, FileSystemLoader, StrictUndefined
from .model import TunnelDefinition
from .units import UnitSpec


TEMPLATES_PATH = os.path.dirname(os.path.abspath(__file__)) + '/templates'


class Renderer(object):
    """
    Renders all files generated for a tunnel. Output depends only on the definition, so it is byte-identical
    between runs
    """

    _env: Environment

    def __init__(self, templates_path: str = TEMPLATES_PATH, autossh_binary: str = '/usr/bin/autossh'):
        self._autossh_binary = autossh_binary
        self._env = Environment(
            loader=FileSystemLoader(templates_path),
            autoescape=False,
            undefined=StrictUndefined,
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True
        )

    def render_config(self, definition: TunnelDefinition) -> str:
        return self._render('autossh.conf.j2', tunnel=definition)

    def render_unit(self, definition: TunnelDefinition, spec: UnitSpec) -> str:
        return self._render(
            spec.template,
            tunnel=definition,
            flags=definition.create_autossh_flags(daemonize=spec.daemonize),
            autossh_binary=self._autossh_binary
        )

    def render_ssh_config_block(self, definition: TunnelDefinition, marker: str) -> str:
        return self._render('ssh_config_block.j2', tunnel=definition, marker=marker)

    def _render(self, template_name: str, **variables) -> str:
        return self._env.get_template(template_name).render(**variables)
