"""File system wrappers for error mapping, operation counting and debug logging."""