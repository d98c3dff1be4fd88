"""
CODEWRIGHT Identity

Name, version and banner shared by the CLI and the agent console.
"""

__codename__ = "CODEWRIGHT"
__version__ = "0.4.0"
__tagline__ = "Tag-driven coding agent with forgiving patches"

BANNER = r"""
   ___         _                   _      _   _
  / __|___  __| |_____ __ ___ _ _(_)__ _| |_| |_
 | (__/ _ \/ _` / -_) V  V / '_| / _` | ' \  _|
  \___\___/\__,_\___|\_/\_/|_| |_\__, |_||_\__|
                                 |___/
"""
