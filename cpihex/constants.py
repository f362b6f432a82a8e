"""
cpihex.constants - global constants

(c) 2019--2024 Rob Hagemans
licence: https://opensource.org/licenses/MIT
"""

VERSION = '0.3.0'

# C source written in text mode unless another name is given
DEFAULT_OUTPUT = 'font.h'
