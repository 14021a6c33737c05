"""Walkers that visit the files and directories of a git clone or of a repository on GitHub."""