"""
Reports Module - Salidas

Motor de reportes financieros sobre pedidos (ingresos) y salidas (gastos).

Este módulo NO crea nuevas tablas: normaliza los registros existentes a
transacciones canónicas y las agrega en memoria.

Funcionalidades principales:
- Balance mensual por canal de venta vs salidas ordinarias/extraordinarias
- Análisis de salidas por categoría, tipo, mes y método de pago
- Resumen general y estadísticas del mes
- Listado paginado de salidas con filtros y ordenamiento
- Alcance por permisos de categoría del usuario

Architecture Pattern: Service Layer
- transactions.py, permissions.py, aggregation.py, balance.py, overview.py -> núcleo puro
- pagination.py, crud.py -> consultas SQLAlchemy
- services/ -> orquestación por reporte
- routers/ -> endpoints FastAPI con validaciones
- schemas/ -> modelos Pydantic para responses
"""

__version__ = "1.0.0"
