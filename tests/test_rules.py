"""Tests for the built-in rules."""

from pathlib import Path

import pytest

from oops.config.models import Settings
from oops.core.rule import RuleContext
from oops.core.types import CapturedCommand
from oops.rules import RULE_CLASSES, build_rule_catalog, rule_names
from oops.rules.cd import CdMkdirRule, CdParentRule
from oops.rules.git import (
    GitCommandTypoRule,
    GitNotCommandRule,
    GitPushForceRule,
    GitPushPullRule,
    expand_git_alias,
    get_all_matched_commands,
)
from oops.rules.no_command import NoCommandRule
from oops.rules.ssh import SshKnownHostsRule
from oops.rules.sudo import SudoRule
from oops.rules.typo import PythonCommandRule, SlLsRule
from oops.shells.bash import Bash
from oops.shells.fish import Fish

GIT_PSUH_OUTPUT = """git: 'psuh' is not a git command. See 'git --help'.

The most similar command is
\tpush
"""

GIT_PUSH_REJECTED = """To github.com:user/repo.git
 ! [rejected]        main -> main (non-fast-forward)
error: failed to push some refs to 'github.com:user/repo.git'
hint: Updates were rejected because the tip of your current branch is behind
hint: its remote counterpart.
"""


class TestCatalog:
    """Catalog construction."""

    def test_names_unique(self):
        assert len(set(rule_names())) == len(RULE_CLASSES)

    def test_build_shares_context(self, context):
        rules = build_rule_catalog(context)
        assert [rule.name for rule in rules] == rule_names()
        assert all(rule.context is context for rule in rules)

    def test_side_effect_flag(self, context):
        flags = {rule.name: rule.has_side_effect for rule in build_rule_catalog(context)}
        assert flags["ssh_known_hosts"] is True
        assert flags["sudo"] is False


class TestSudo:
    def test_permission_denied(self, context):
        rule = SudoRule(context)
        command = CapturedCommand("apt install vim", "E: Could not open lock file - open (13: Permission denied)")
        assert rule.is_match(command)
        assert rule.get_new_command(command) == ["sudo apt install vim"]

    def test_keeps_environment_for_variables(self, context):
        command = CapturedCommand("cat $HOME/x", "Permission denied")
        assert SudoRule(context).get_new_command(command) == ["sudo -E cat $HOME/x"]

    def test_chained_commands(self, context):
        command = CapturedCommand("mkdir /opt/a && touch /opt/a/b", "Permission denied")
        assert SudoRule(context).get_new_command(command) == [
            "sudo sh -c 'mkdir /opt/a && touch /opt/a/b'"
        ]

    @pytest.mark.parametrize("script", ["sudo apt install vim", "su -c ls", "/usr/bin/doas ls"])
    def test_already_privileged(self, context, script):
        assert not SudoRule(context).is_match(CapturedCommand(script, "Permission denied"))

    def test_shell_builtin(self, context):
        assert not SudoRule(context).is_match(CapturedCommand("cd /root", "cd: Permission denied"))

    def test_other_errors(self, context):
        assert not SudoRule(context).is_match(CapturedCommand("ls x", "No such file or directory"))


class TestSlLs:
    def test_script_only(self, context):
        rule = SlLsRule(context)
        command = CapturedCommand("sl -la")
        assert rule.is_match(command)
        assert rule.get_new_command(command) == ["ls -la"]

    def test_bare(self, context):
        assert SlLsRule(context).get_new_command(CapturedCommand("sl")) == ["ls"]

    def test_other_program(self, context):
        assert not SlLsRule(context).is_match(CapturedCommand("slack"))


class TestCd:
    def test_cd_parent(self, context):
        rule = CdParentRule(context)
        assert rule.is_match(CapturedCommand("cd.."))
        assert rule.get_new_command(CapturedCommand("cd..")) == ["cd .."]
        assert rule.get_new_command(CapturedCommand("cd../src")) == ["cd ../src"]
        assert not rule.is_match(CapturedCommand("cd .."))

    def test_cd_mkdir_bash(self, context):
        rule = CdMkdirRule(context)
        command = CapturedCommand("cd new/src", "bash: cd: new/src: No such file or directory")
        assert rule.is_match(command)
        assert rule.get_new_command(command) == ["mkdir -p new/src && cd new/src"]

    def test_cd_mkdir_fish(self, settings, executables):
        context = RuleContext(settings=settings, executables=executables, shell=Fish(environ={}))
        command = CapturedCommand("cd new", "cd: The directory 'new' does not exist")
        assert CdMkdirRule(context).get_new_command(command) == ["mkdir -p new; and cd new"]

    def test_cd_mkdir_needs_argument(self, context):
        assert not CdMkdirRule(context).is_match(CapturedCommand("cd", "No such file or directory"))


class TestPythonCommand:
    def test_python_to_python3(self, context):
        rule = PythonCommandRule(context)
        command = CapturedCommand("python script.py", "sh: 1: python: not found")
        assert rule.is_match(command)
        assert rule.get_new_command(command) == ["python3 script.py"]

    def test_pip_to_pip3(self, context):
        command = CapturedCommand("pip install rich", "pip: command not found")
        assert PythonCommandRule(context).get_new_command(command) == ["pip3 install rich"]

    def test_quoted_program(self, context):
        command = CapturedCommand('"python" x.py', "sh: 1: python: not found")
        assert PythonCommandRule(context).get_new_command(command) == ['"python3" x.py']

    def test_no_alternative_installed(self, context):
        command = CapturedCommand("python3 x.py", "python3: command not found")
        assert PythonCommandRule(context).get_new_command(command) == []

    def test_not_python(self, context):
        assert not PythonCommandRule(context).is_match(CapturedCommand("ruby x", "not found"))


class TestNoCommand:
    def test_suggests_executable(self, context):
        rule = NoCommandRule(context)
        command = CapturedCommand("gti status", "bash: gti: command not found")
        assert rule.is_match(command)
        assert rule.get_new_command(command)[0] == "git status"

    def test_existing_program_not_matched(self, context):
        command = CapturedCommand("git foo", "git: 'foo' not found")
        assert not NoCommandRule(context).is_match(command)

    def test_uses_history(self, settings, executables):
        shell = Bash(environ={"TF_HISTORY": "terraform plan\nls"})
        context = RuleContext(settings=settings, executables=executables, shell=shell)
        command = CapturedCommand("terrafrom plan", "terrafrom: command not found")
        assert NoCommandRule(context).get_new_command(command) == ["terraform plan"]

    def test_respects_num_close_matches(self, executables, shell):
        context = RuleContext(settings=Settings(num_close_matches=1), executables=executables, shell=shell)
        command = CapturedCommand("apt-gte update", "apt-gte: command not found")
        assert len(NoCommandRule(context).get_new_command(command)) == 1

    def test_no_similar_program(self, context):
        command = CapturedCommand("qqqqqq", "qqqqqq: command not found")
        assert NoCommandRule(context).get_new_command(command) == []


class TestGit:
    def test_not_command_uses_git_suggestion(self, context):
        rule = GitNotCommandRule(context)
        command = CapturedCommand("git psuh", GIT_PSUH_OUTPUT)
        assert rule.is_match(command)
        assert rule.get_new_command(command) == ["git push"]

    def test_not_command_keeps_arguments(self, context):
        output = GIT_PSUH_OUTPUT.replace("psuh", "brnch").replace("\tpush", "\tbranch")
        command = CapturedCommand("git brnch -a", output)
        assert GitNotCommandRule(context).get_new_command(command) == ["git branch -a"]

    def test_not_command_inline_suggestion(self, context):
        rule = GitNotCommandRule(context)
        command = CapturedCommand("git psuh", "git: 'psuh' is not a git command. Did you mean 'push'?")
        assert rule.is_match(command)
        assert rule.get_new_command(command) == ["git push"]

    def test_inline_suggestion_parsed(self):
        output = "git: 'stauts' is not a git command. Did you mean 'status'?\nhint: run git help\n"
        assert get_all_matched_commands(output) == ["status"]

    def test_not_command_multiple_suggestions(self):
        output = "The most similar commands are\n\tstash\n\tstatus\n"
        assert get_all_matched_commands(output) == ["stash", "status"]

    def test_not_git(self, context):
        assert not GitNotCommandRule(context).is_match(CapturedCommand("hg psuh", GIT_PSUH_OUTPUT))

    def test_typo_without_suggestion(self, context):
        rule = GitCommandTypoRule(context)
        command = CapturedCommand("git psuh", "git: 'psuh' is not a git command. See 'git --help'.")
        assert rule.is_match(command)
        assert rule.get_new_command(command)[0] == "git push"

    def test_typo_defers_to_git_suggestion(self, context):
        assert not GitCommandTypoRule(context).is_match(CapturedCommand("git psuh", GIT_PSUH_OUTPUT))

    def test_push_pull(self, context):
        rule = GitPushPullRule(context)
        command = CapturedCommand("git push origin main", GIT_PUSH_REJECTED)
        assert rule.is_match(command)
        assert rule.get_new_command(command) == ["git pull origin main && git push origin main"]

    def test_push_force_disabled_by_default(self, context):
        rule = GitPushForceRule(context)
        assert rule.enabled_by_default is False
        command = CapturedCommand("git push", GIT_PUSH_REJECTED)
        assert rule.is_match(command)
        assert rule.get_new_command(command) == ["git push --force-with-lease"]

    def test_alias_expansion(self):
        command = CapturedCommand(
            "git ps",
            "trace: alias expansion: ps => 'push'\n" + GIT_PSUH_OUTPUT,
        )
        assert expand_git_alias(command).script == "git push"


class TestSshKnownHosts:
    OUTPUT = """@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@
@    WARNING: REMOTE HOST IDENTIFICATION HAS CHANGED!     @
@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@
Offending ECDSA key in {path}:2
Host key verification failed.
"""

    def test_match_and_rerun(self, context, tmp_path: Path):
        rule = SshKnownHostsRule(context)
        command = CapturedCommand("ssh example.com", self.OUTPUT.format(path=tmp_path / "kh"))
        assert rule.is_match(command)
        assert rule.get_new_command(command) == ["ssh example.com"]

    def test_only_ssh_and_scp(self, context):
        assert not SshKnownHostsRule(context).is_match(CapturedCommand("git pull", self.OUTPUT))

    def test_side_effect_removes_offending_line(self, context, tmp_path: Path):
        known_hosts = tmp_path / "known_hosts"
        known_hosts.write_text("host1 key1\nhost2 key2\nhost3 key3\n")
        command = CapturedCommand("ssh host2", self.OUTPUT.format(path=known_hosts))

        SshKnownHostsRule(context).side_effect(command, "ssh host2")

        assert known_hosts.read_text() == "host1 key1\nhost3 key3\n"

    def test_side_effect_missing_file(self, context, tmp_path: Path):
        command = CapturedCommand("ssh host2", self.OUTPUT.format(path=tmp_path / "missing"))
        SshKnownHostsRule(context).side_effect(command, "ssh host2")
