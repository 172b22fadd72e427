from codereview.cli.commands.submit.command import submit_cmd

__all__ = ["submit_cmd"]
