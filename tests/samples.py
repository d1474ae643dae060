"""Canned tool output shared by the tests."""

# Trimmed real ldd output for a binary linked against an old ffmpeg.
LDD_FFMPEG_OUTPUT = """\
\tlinux-vdso.so.1 (0x00007ffea89a7000)
\tlibavdevice.so.57 => not found
\tlibavfilter.so.6 => not found
\tlibavformat.so.57 => not found
\tlibavcodec.so.57 => not found
\tlibavresample.so.3 => not found
\tlibpostproc.so.54 => not found
\tlibswresample.so.2 => not found
\tlibswscale.so.4 => not found
\tlibavutil.so.55 => not found
\tlibm.so.6 => /usr/lib/libm.so.6 (0x00007f4bd9cc3000)
\tlibpthread.so.0 => /usr/lib/libpthread.so.0 (0x00007f4bd9ca2000)
\tlibc.so.6 => /usr/lib/libc.so.6 (0x00007f4bd9add000)
\t/lib64/ld-linux-x86-64.so.2 => /usr/lib64/ld-linux-x86-64.so.2 (0x00007f4bda08d000)
"""

PACMAN_QI_PYTHON = """\
Name            : python
Version         : 3.12.1-1
Description     : The Python programming language
Architecture    : x86_64
"""
