"""App — coração do sistema: ciclo de vida de agendamentos.

Subpastas:
- bootstrap/: composition root (factories, inicialização, wiring)
- domain/: modelos, erros e comandos de efeito colateral
- use_cases/: ciclo de vida e execução de efeitos pós-commit
- services/: janela ocupada, overlap, validação, reconciliação
- infra/: implementações concretas de IO (memória, Redis)
- protocols/: contratos/interfaces dos colaboradores externos
- observability/: correlation id e métricas em logs estruturados

Padrão: app executa; fsm governa os status; config configura; utils apoia.
"""
