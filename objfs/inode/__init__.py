"""Names, cores, type cache and inodes for symlinks and directories backed by bucket objects."""