import unicodedata


def normalizar_nombre(nombre):
    """'  Colegio San José ' -> 'colegio san jose' (clave de comparación, no de visualización)."""
    if not nombre:
        return ''
    sin_acentos = ''.join(
        c for c in unicodedata.normalize('NFD', str(nombre))
        if unicodedata.category(c) != 'Mn'
    )
    return ' '.join(sin_acentos.lower().split())


def normalizar_capitalizado(nombre):
    normalizado = normalizar_nombre(nombre)
    return normalizado[:1].upper() + normalizado[1:]
