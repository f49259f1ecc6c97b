"""
Oops Shells - PowerShell.
"""

from __future__ import annotations

import os

from oops.shells.base import Shell


class PowerShell(Shell):
    """
    Windows PowerShell and PowerShell Core (pwsh).

    PSReadLine records the alias call itself, so put_to_history is a
    no-op.
    """

    name = "powershell"
    builtins = frozenset({
        "cd", "chdir", "cls", "copy", "del", "dir", "echo", "erase", "exit",
        "Get-ChildItem", "Get-Content", "Get-History", "Get-Location", "history",
        "ls", "md", "mkdir", "move", "popd", "pushd", "pwd", "rd", "ren", "rm",
        "rmdir", "Set-Location", "type", "Write-Output",
    })

    def app_alias(self, alias_name: str) -> str:
        return f"""function {alias_name} {{
    $history = (Get-History -Count 1).CommandLine;
    if (-not [string]::IsNullOrWhiteSpace($history)) {{
        $env:TF_SHELL = "powershell";
        $env:TF_ALIAS = "{alias_name}";
        $fuck = $(oops $args $history);
        if (-not [string]::IsNullOrWhiteSpace($fuck)) {{
            if ($fuck.StartsWith("echo")) {{ $fuck = $fuck.Substring(5); }}
            else {{ iex "$fuck"; }}
        }}
    }}
    [Console]::ResetColor()
}}
"""

    def get_history_file_name(self) -> str:
        if os.name == "nt":
            app_data = self.environ.get("APPDATA", "~\\AppData\\Roaming")
            return f"{app_data}\\Microsoft\\Windows\\PowerShell\\PSReadLine\\ConsoleHost_history.txt"
        return "~/.local/share/powershell/PSReadLine/ConsoleHost_history.txt"

    def and_(self, *commands: str) -> str:
        return "(" + ") -and (".join(commands) + ")"

    def or_(self, *commands: str) -> str:
        return "(" + ") -or (".join(commands) + ")"

    def quote(self, value: str) -> str:
        return "'" + value.replace("'", "''") + "'"
