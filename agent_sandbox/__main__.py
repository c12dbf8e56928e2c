from agent_sandbox.main import main

main()
