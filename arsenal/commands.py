"""
Arsenal command layer: declare a command tree and parse arguments against it.

What this module provides
- App: one node of the command tree (the root application or a subcommand).
  • Options and flags declared through add_option/add_flag, configured with the
    fluent OptionBuilder they return.
  • Subcommands declared through add_subcommand; each child is an App owned by
    its parent.
  • parse(args) / parse_argv(argv): run the parser and return a ParseResult.
  • help(): rich-rendered help, returned as plain text.
- Settings: the two parser toggles (unknown options, POSIX grouping).

Core ideas
- Declaration is mutable, parsing is not: parse() never touches the App, so one
  App can be parsed any number of times (concurrently, too).
- Aliases live in two lookup tables (short → name, long → name) filled at
  declaration time; collisions are rejected immediately with ValueError.

Quick start
    from arsenal import App, validators

    app = App("tool", "does things")
    app.add_flag("v,verbose", "chatty output")
    app.add_option("p,port", "port to bind").type(int).default_value(8080).check(validators.range(1, 65535))
    build = app.add_subcommand("build", "compile the project")
    build.add_option("target").required()

    result = app.parse(["-v", "build", "--target", "x86"])
    if not result:
        result.report()

Styling
- help() honours the __styles__ mapping of __main__, like every renderer of the
  package (see arsenal.faults).
"""
import io
import sys
from types import MappingProxyType
from typing import NamedTuple

from rich.box import ROUNDED
from rich.console import Console, Group
from rich.table import Table
from rich.text import Text

from . import parser
from .faults import _styles
from .options import OptionSpec, OptionBuilder, Cardinality, parse_names
from .utils import *
from .values import Kind


class Settings(NamedTuple):
    allow_unknown_options: bool = False
    enable_posix_grouping: bool = True


def _sanitize_text(object, field, /, *, empty=True):
    if not isinstance(object, str):
        raise TypeError("command %r must be a string" % field)
    object = object.strip()
    if not empty and not object:
        raise ValueError("command %r cannot be empty" % field)
    return object


class App:
    """
    One command of the tree.

    Parameters
    - name: non-empty command name (program name for the root).
    - description: one-line summary shown in help.

    Accessors
    - name(), description(): metadata.
    - options: read-only ordered mapping name → OptionSpec.
    - subcommands: read-only mapping name → App.
    - settings: current Settings.
    """

    def __init__(self, name, description="", /):
        self._name = _sanitize_text(name, "name", empty=False)
        if self._name.startswith("-"):
            raise ValueError("command name %r cannot start with '-'" % self._name)
        self._description = _sanitize_text(description, "description")
        self._version = None
        self._footer = None
        self._settings = Settings()
        self._options = {}
        self._shorts = {}
        self._longs = {}
        self._subcommands = {}
        self._parent = None

    # metadata

    def name(self):
        return self._name

    def description(self):
        return self._description

    def version(self, text=Unset, /):
        """
        Set the version string (returns the App); without argument, return it.
        """
        if text is Unset:
            return self._version
        self._version = _sanitize_text(text, "version", empty=False)
        return self

    def footer(self, text=Unset, /):
        """
        Set the help footer (returns the App); without argument, return it.
        """
        if text is Unset:
            return self._footer
        self._footer = _sanitize_text(text, "footer", empty=False)
        return self

    @property
    def parent(self):
        return self._parent

    @property
    def path(self):
        """
        Names from the root command down to this one.
        """
        path = []
        command = self
        while command is not None:
            path.append(command._name)
            command = command._parent
        return tuple(reversed(path))

    # settings

    @property
    def settings(self):
        return self._settings

    def allow_unknown_options(self, allow=True, /):
        self._settings = self._settings._replace(allow_unknown_options=bool(allow))
        return self

    def enable_posix_grouping(self, enable=True, /):
        self._settings = self._settings._replace(enable_posix_grouping=bool(enable))
        return self

    # declaration

    @property
    def options(self):
        return MappingProxyType(self._options)

    @property
    def subcommands(self):
        return MappingProxyType(self._subcommands)

    def add_option(self, names, description="", /):
        """
        Declare a single-value STRING option; returns its OptionBuilder.

        names: "s,long", "long" or "s" (leading dashes are tolerated).
        """
        short, long = parse_names(names)
        return self._register(OptionSpec(short, long, description=description))

    def add_flag(self, names, description="", /):
        """
        Declare a BOOL flag (takes no value); returns its OptionBuilder.
        """
        short, long = parse_names(names)
        return self._register(OptionSpec(
            short, long, description=description, type=Kind.BOOL, cardinality=Cardinality.flag()
        ))

    def add_subcommand(self, name, description="", /):
        """
        Declare a child command and return it for configuration.
        """
        child = App(name, description)
        if child._name in self._subcommands:
            raise ValueError("subcommand %r is already declared on %r" % (child._name, self._name))
        child._parent = self
        self._subcommands[child._name] = child
        return child

    def _register(self, spec, /):
        if spec.name in self._options:
            raise ValueError("option %r is already declared on %r" % (spec.name, self._name))
        for alias, table, dashes in ((spec.short, self._shorts, "-"), (spec.long, self._longs, "--")):
            if alias is not None and alias in table:
                raise ValueError("alias %r is already used by option %r" % (dashes + alias, table[alias]))
        self._install(spec)
        return OptionBuilder(self, spec.name)

    def _install(self, spec, /):
        """
        Store (or replace) a spec under its name and refresh the alias tables.
        """
        self._options[spec.name] = spec
        if spec.short is not None:
            self._shorts[spec.short] = spec.name
        if spec.long is not None:
            self._longs[spec.long] = spec.name

    def resolve(self, alias, /, *, long=False):
        """
        OptionSpec behind an alias (without dashes), or None.

        Short lookups fall back to long aliases so that single-dash long spellings
        ("-verbose") are recognized.
        """
        if long:
            name = self._longs.get(alias)
        else:
            name = self._shorts.get(alias) or self._longs.get(alias)
        return None if name is None else self._options[name]

    def aliases(self):
        """
        Every dashed alias of this command, in declaration order.
        """
        return [alias for spec in self._options.values() for alias in spec.aliases]

    # parsing

    def parse(self, args, /, *, environ=None):
        """
        Parse arguments (program name excluded) against this command.

        Parameters
        - args: iterable of strings.
        - environ: mapping used for env() fallbacks (defaults to os.environ).

        Returns
        - ParseResult; parse problems are reported in it, never raised.

        Raises
        - TypeError: args is a string or holds non-string items.
        """
        if isinstance(args, (str, bytes)):
            raise TypeError("parse() expects an iterable of strings, not a single string")
        args = list(args)
        for index, arg in enumerate(args):
            if not isinstance(arg, str):
                raise TypeError("parse() argument %d must be a string, not %s" % (index, type(arg).__name__))
        return parser.parse(self, args, environ)

    def parse_argv(self, argv=None, /, *, environ=None):
        """
        Parse a full argv (sys.argv by default); argv[0] is the program name and is dropped.
        """
        argv = list(sys.argv if argv is None else argv)
        return self.parse(argv[1:], environ=environ)

    # rendering

    def _renderables(self):
        styles = _styles({
            "usage-label": "bold #00E6FF",
            "program-name": "bold #FF4D94",
            "version": "#9CA3AF",
            "description-section": "italic #A3A3A3",
            "group-label": "bold #FFFFFF",
            "option-name": "bold #00E6FF",
            "flag-name": "bold #22C55E",
            "deprecated-name": "bold #F97316 strike",
            "metavar": "bold #FFD600",
            "argument-description": "#9CA3AF",
            "annotation": "dim",
            "children-title": "bold #FFFFFF",
            "children-table": "#4B5563",
            "children": "bold #36C5F0",
            "children-description": "#9CA3AF",
            "epilog-section": "#737373",
        })
        renders = []

        header = Text(" ".join(self.path), styles["program-name"])
        if self._version:
            header.append(" ").append(self._version, styles["version"])
        renders.append(header)

        if self._description:
            renders.append(Text(self._description, styles["description-section"]))

        usage = Text.assemble(("usage", styles["usage-label"]), ": ", (" ".join(self.path), styles["program-name"]))
        if self._options:
            usage.append(" [options]")
        if self._subcommands:
            usage.append(" <command> ...")
        renders.extend((Text(), usage))

        groups = {}
        for spec in self._options.values():
            groups.setdefault(spec.group or "options", []).append(spec)

        for group, specs in groups.items():
            table = Table(box=None, show_header=False, padding=(0, 2, 0, 2), title_justify="left")
            table.add_column("names", no_wrap=True)
            table.add_column("description")
            for spec in specs:
                table.add_row(self._names(spec, styles), self._details(spec, styles))
            renders.extend((Text(), Text.assemble((group, styles["group-label"]), ":"), table))

        if self._subcommands:
            table = Table(
                "name", "help",
                title=Text("subcommands", styles["children-title"]),
                box=ROUNDED,
                style=styles["children-table"],
                header_style=styles["children-title"],
            )
            for name, child in self._subcommands.items():
                table.add_row(
                    Text(name, styles["children"]),
                    Text(child._description or "no description", styles["children-description"]),
                )
            renders.extend((Text(), table))

        if self._footer:
            renders.extend((Text(), Text(self._footer, styles["epilog-section"])))

        return renders

    @staticmethod
    def _names(spec, styles, /):
        style = "deprecated-name" if spec.deprecated else "flag-name" if spec.is_flag else "option-name"
        names = Text(", ").join(Text(alias, styles[style]) for alias in spec.aliases)
        if spec.is_flag:
            return names
        metavar = Text("<%s>" % spec.element.label, styles["metavar"])
        match spec.cardinality:
            case Cardinality(min=1, max=1):
                return Text.assemble(names, " ", metavar)
            case Cardinality(max=None):
                return Text.assemble(names, " ", metavar, "...")
            case cardinality:
                return Text.assemble(names, " ", metavar, "{%s}" % cardinality)

    @staticmethod
    def _details(spec, styles, /):
        details = Text(spec.description, styles["argument-description"])
        annotations = []
        if spec.required:
            annotations.append("required")
        if spec.default is not None:
            annotations.append("default: %s" % ", ".join(spec.default.text()))
        if spec.env:
            annotations.append("env: %s" % spec.env)
        if spec.deprecated:
            annotations.append("deprecated" + (", use %s" % spec.deprecated.alternative if spec.deprecated.alternative else ""))
        if annotations:
            if details:
                details.append(" ")
            details.append("[%s]" % "; ".join(annotations), styles["annotation"])
        return details

    def help(self, /, *, width=80):
        """
        Help text of this command as plain text (styles are dropped).
        """
        console = Console(file=io.StringIO(), width=width, record=True, color_system=None, force_terminal=False)
        console.print(Group(*self._renderables()))
        return console.export_text().rstrip() + "\n"

    def print_help(self, console=None, /):
        """
        Print the styled help through rich (stdout by default).
        """
        (console or Console()).print(Group(*self._renderables()))

    def __repr__(self):
        return "app(%s)" % ", ".join("%s=%r" % pair for pair in self.__rich_repr__())

    def __rich_repr__(self):
        yield "name", self._name
        if self._description:
            yield "description", self._description
        yield "options", list(self._options)
        if self._subcommands:
            yield "subcommands", list(self._subcommands)


__all__ = (
    "App",
    "Settings",
)
