"""
Ядро стенда: дескрипторы преобразований, курсорный буфер, протокол
бэкенда, метаданные, реестр и иерархия исключений.
"""
