"""
Выражения шаблонов: модель AST, парсер, семантика значений и вычислитель.
"""
