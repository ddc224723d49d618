"""CLI constants and configuration."""

from prompt_toolkit.styles import Style

COMMANDS = [
    "login", "logout", "whoami",
    "list", "search", "page", "next", "prev", "view",
    "upload", "name", "submit", "cancel", "status",
    "rename", "delete",
    "users", "user-filter", "user-sort", "user-search",
    "ban", "unban", "toggle-admin", "delete-user", "delete-sound",
    "settings", "set", "toggle-format", "save-settings",
    "clear", "exit", "help",
]

STYLE = Style.from_dict(
    {
        "prompt": "#F45935 bold",
        "command": "#0088ff bold",
        "bottom-toolbar": "#ffffff bg:#333333",
    }
)

RED_ORANGE = "\033[38;2;244;89;53m"
GREEN = "\033[32m"
YELLOW = "\033[33m"
RED = "\033[31m"
RESET = "\033[0m"

LOGO = f"""{RED_ORANGE}
  ___                      _ _                       _
 / __| ___ _  _ _ _  __| | |__  ___  __ _ _ _ __| |
 \\__ \\/ _ \\ || | ' \\/ _` | '_ \\/ _ \\/ _` | '_/ _` |
 |___/\\___/\\_,_|_||_\\__,_|_.__/\\___/\\__,_|_| \\__,_|
{RESET}"""

WELCOME_TITLE = "Soundboard CLI - personal sound library"
WELCOME_HELP = "Type 'help' for commands or 'exit' to quit.\n"

PROMPT_TEXT = "soundboard> "

HELP_TEXT = """Available commands:
  login [session-cookie]              Store the session cookie (no argument: show Steam sign-in URL)
  logout                              End the session
  whoami                              Show the signed-in user
  list [page]                         List your sounds
  search [text]                       Filter sounds by name (empty = all)
  page <n> | next | prev              Change page
  view [list|grid]                    Show or set the display mode
  upload <file> [name]                Select an audio file (.mp3, .wav, .ogg, max 1 MiB)
  name <name>                         Change the name of the selected file
  submit                              Upload the selected file
  cancel                              Drop the selected file and any cooldown
  status                              Show upload state and cooldown
  rename <sound-id> <name>            Rename a sound
  delete <sound-id>                   Delete a sound
Admin commands:
  users [page]                        List users
  user-filter <all|admins|banned>     Filter users
  user-sort <username|createdAt|soundCount>   Toggle sort on a column
  user-search [text]                  Search users by name or Steam ID
  ban | unban | toggle-admin | delete-user <user-id>
  delete-sound <sound-id>             Delete any sound
  settings                            Show global settings
  set <field> <value>                 Edit a setting (max_file_size accepts MiB with a trailing 'mb')
  toggle-format <mime-type>           Allow or disallow a format
  save-settings                       Save edited settings
  clear                               Clear screen and redisplay welcome message
  help                                Show this help
  exit                                Exit REPL

Examples:
  upload sounds/airhorn.mp3 "Air horn"
  submit
  search horn
  rename 3f2a "Big horn"
  user-sort soundCount
  set max_file_size 1.5mb"""

SUPPORTED_FILE_EXTENSIONS = (".mp3", ".wav", ".ogg")
