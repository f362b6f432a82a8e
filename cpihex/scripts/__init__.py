"""
cpihex.scripts - command-line entry points

(c) 2019--2024 Rob Hagemans
licence: https://opensource.org/licenses/MIT
"""
